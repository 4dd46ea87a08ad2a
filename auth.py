from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from datetime import timedelta
import logging
import uuid

import bcrypt
import jwt

from config import get_settings
from database import get_db, utcnow, User, AuthToken
from schemas import UserCreate, UserLogin, PasswordReset, AuthResponse, Message

logger = logging.getLogger("expenso.auth")

auth_router = APIRouter()
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(user: User):
    """Sign a token for ``user``; returns ``(token, expires)``."""
    settings = get_settings()
    expires = utcnow() + timedelta(days=settings.token_expire_days)
    to_encode = {
        "sub": user.id,
        "email": user.email,
        "exp": expires,
        "jti": uuid.uuid4().hex,
    }
    encoded_jwt = jwt.encode(
        to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm
    )
    return encoded_jwt, expires


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def issue_token(db: Session, user: User) -> str:
    """Sign a token and record it so it can be revoked later."""
    token, expires = create_access_token(user)
    db.add(AuthToken(token=token, user_id=user.id, identifier=user.email, expires=expires))
    return token


async def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise credentials_exception

    stored = db.query(AuthToken).filter(AuthToken.token == token).first()
    if stored is None or stored.user_id != user_id or stored.expires <= utcnow():
        logger.warning("Rejected revoked or unknown token for user %s", user_id)
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception
    return user


@auth_router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register(user: UserCreate, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == user.email).first()
    if db_user:
        logger.warning("Registration rejected, email already in use")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        )

    new_user = User(
        name=user.name, email=user.email, password=hash_password(user.password)
    )
    db.add(new_user)
    db.flush()
    access_token = issue_token(db, new_user)
    db.commit()
    db.refresh(new_user)

    logger.info("Registered user %s", new_user.id)
    return {"message": "Registration successful.", "user": new_user, "token": access_token}


@auth_router.post("/login", response_model=AuthResponse)
async def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == user.email).first()
    if not db_user or not verify_password(user.password, db_user.password):
        logger.warning("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    access_token = issue_token(db, db_user)
    db.commit()

    logger.info("User %s logged in", db_user.id)
    return {"message": "Login successful.", "user": db_user, "token": access_token}


@auth_router.post("/logout", response_model=Message)
async def logout(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    db.query(AuthToken).filter(AuthToken.token == token).delete()
    db.commit()
    logger.info("User %s logged out", current_user.id)
    return {"message": "Logged out successfully."}


@auth_router.post("/reset-password", response_model=Message)
async def reset_password(reset: PasswordReset, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == reset.email).first()
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found.")

    db_user.password = hash_password(reset.new_password)
    # sessions issued under the old password end here
    db.query(AuthToken).filter(AuthToken.user_id == db_user.id).delete()
    db.commit()
    logger.info("Password reset for user %s", db_user.id)
    return {"message": "Password reset successful."}
