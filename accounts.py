from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from auth import get_current_user
from database import get_db, Account, User
from schemas import AccountIn, AccountOut

logger = logging.getLogger("expenso.accounts")

accounts_router = APIRouter()


@accounts_router.get("", response_model=list[AccountOut])
async def get_accounts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Account).filter(Account.user_id == current_user.id).all()


@accounts_router.post(
    "", response_model=AccountOut, status_code=status.HTTP_201_CREATED
)
async def create_account(
    account: AccountIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    existing = (
        db.query(Account)
        .filter(Account.user_id == current_user.id, Account.name == account.name)
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Account already exists"
        )

    db_account = Account(name=account.name, user_id=current_user.id)
    db.add(db_account)
    db.commit()
    db.refresh(db_account)

    logger.info("User %s created account %s", current_user.id, db_account.id)
    return db_account
