from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from auth import get_current_user
from database import get_db, Category, User
from schemas import CategoryIn, CategoryOut, CategoryMessage, Message

logger = logging.getLogger("expenso.categories")

categories_router = APIRouter()


@categories_router.get("", response_model=list[CategoryOut])
async def get_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Category)
        .filter(Category.user_id == current_user.id)
        .order_by(Category.name)
        .all()
    )


@categories_router.post(
    "", response_model=CategoryMessage, status_code=status.HTTP_201_CREATED
)
async def add_category(
    category: CategoryIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    existing = (
        db.query(Category)
        .filter(Category.user_id == current_user.id, Category.name == category.name)
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A category with this name already exists for the user.",
        )

    db_category = Category(name=category.name, user_id=current_user.id)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)

    logger.info("User %s added category %s", current_user.id, db_category.id)
    return {"message": "Category created successfully.", "category": db_category}


@categories_router.delete("/{category_id}", response_model=Message)
async def remove_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = (
        db.query(Category)
        .filter(Category.id == str(category_id), Category.user_id == current_user.id)
        .first()
    )
    if not category:
        raise HTTPException(status_code=404, detail="The category does not exist.")

    db.delete(category)
    db.commit()
    logger.info("User %s removed category %s", current_user.id, category_id)
    return {"message": "Category removed successfully."}
