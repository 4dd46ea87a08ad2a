from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from auth import get_current_user
from database import get_db, User
from schemas import Profile, UserUpdate, UserMessage, Message

logger = logging.getLogger("expenso.users")

users_router = APIRouter()


@users_router.get("/me", response_model=Profile)
async def profile(current_user: User = Depends(get_current_user)):
    return {"user": current_user}


@users_router.patch("/me", response_model=UserMessage)
async def update_profile(
    update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if update.email is not None and update.email != current_user.email:
        taken = (
            db.query(User)
            .filter(User.email == update.email, User.id != current_user.id)
            .first()
        )
        if taken:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email is already registered.",
            )
        current_user.email = update.email

    if update.name is not None:
        current_user.name = update.name

    db.commit()
    db.refresh(current_user)
    logger.info("Updated profile of user %s", current_user.id)
    return {"message": "Profile updated successfully.", "user": current_user}


@users_router.delete("/me", response_model=Message)
async def delete_account(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user_id = current_user.id
    # tokens, expenses, categories and accounts go with the user
    db.delete(current_user)
    db.commit()
    logger.info("Deleted account %s", user_id)
    return {"message": "Account deleted successfully."}
