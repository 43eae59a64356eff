from fastapi import FastAPI, Request
import logging
from fastapi.responses import RedirectResponse
from starlette.middleware.sessions import SessionMiddleware
from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import LoginRequired, NotFoundError
from app.core.utils import redirect_with_error
from app.api import api_router

# Setup logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="eFootball League")

# Signed cookie holding only the user id
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
)

# Ensure database tables are created
@app.on_event("startup")
async def startup():
    try:
        init_db()  # Calls Base.metadata.create_all(bind=engine)
        logger.info("✅ Database connected and tables created.")
    except Exception as e:
        logger.error(f"❌ Database connection error: {e}")
        raise


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse("/login", status_code=303)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning(f"⚠️ {request.url.path}: {exc.message}")
    return RedirectResponse(redirect_with_error("/dashboard", exc.message), status_code=303)


# Include all routes
app.include_router(api_router)


def run():
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
