from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler

from config import get_settings
from database import SessionLocal, AuthToken, init_db, utcnow
from errors import register_exception_handlers
from router import router
from auth import auth_router
from users import users_router
from categories import categories_router
from accounts import accounts_router

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("expenso")


def purge_expired_tokens(session_factory=SessionLocal):
    """Delete auth tokens whose expiry has passed; returns how many went."""
    with session_factory() as db:
        removed = (
            db.query(AuthToken)
            .filter(AuthToken.expires <= utcnow())
            .delete(synchronize_session=False)
        )
        db.commit()
    logger.info("Purged %d expired auth tokens", removed)
    return removed


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    scheduler = None
    if settings.purge_tokens:
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            purge_expired_tokens, "cron", hour=settings.purge_hour, minute=0
        )  # once a day
        scheduler.start()
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(title="Expenso API", lifespan=lifespan)
register_exception_handlers(app)

app.include_router(auth_router, prefix="/auth", tags=["authentication"])
app.include_router(users_router, prefix="/api/users", tags=["users"])
app.include_router(router, prefix="/api", tags=["expenses"])
app.include_router(categories_router, prefix="/api/categories", tags=["categories"])
app.include_router(accounts_router, prefix="/api/accounts", tags=["accounts"])


@app.get("/")
def home():
    return {"message": "Welcome to the Expenso API"}


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
