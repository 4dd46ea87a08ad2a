from pydantic import BaseModel, EmailStr, Field, constr
from datetime import datetime
from typing import Optional


# users / auth


class UserCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    email: EmailStr
    password: constr(min_length=6, max_length=72)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class PasswordReset(BaseModel):
    email: EmailStr
    new_password: constr(min_length=6, max_length=72)


class UserUpdate(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    email: Optional[EmailStr] = None


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class Profile(BaseModel):
    user: UserOut


class UserMessage(BaseModel):
    message: str
    user: UserOut


class AuthResponse(UserMessage):
    token: str
    token_type: str = "bearer"


class Message(BaseModel):
    message: str


# expenses


class ExpenseIn(BaseModel):
    title: constr(strip_whitespace=True, min_length=1)
    description: Optional[str] = None
    amount: float = Field(gt=0, allow_inf_nan=False)
    category: constr(strip_whitespace=True, min_length=1)


class ExpenseOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    amount: float
    category: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ExpenseMessage(BaseModel):
    message: str
    expense: ExpenseOut


class ExpenseList(BaseModel):
    message: str
    expenses: list[ExpenseOut]


class Analytics(BaseModel):
    expense_total: float
    income_total: float
    balance: float


class CategoryTrend(BaseModel):
    category: str
    month: str
    total: float


# categories / accounts


class CategoryIn(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=50)


class CategoryOut(BaseModel):
    id: str
    name: str
    user_id: str

    class Config:
        from_attributes = True


class CategoryMessage(BaseModel):
    message: str
    category: CategoryOut


class AccountIn(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=50)


class AccountOut(BaseModel):
    id: str
    name: str
    user_id: str

    class Config:
        from_attributes = True
