import bcrypt
from dataclasses import dataclass
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import LoginRequired

SESSION_USER_KEY = "user_id"


@dataclass(frozen=True)
class Identity:
    """The authenticated user for the current request."""
    user_id: str
    username: str


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash or an over-long password
        return False


def login_session(request: Request, user_id: str):
    request.session.clear()
    request.session[SESSION_USER_KEY] = user_id


def logout_session(request: Request):
    request.session.clear()


def get_optional_user(request: Request, db: Session = Depends(get_db)):
    """Identity for the session cookie, or None when nobody is logged in."""
    from app.users.services.user_service import UserService

    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None

    user = UserService(db).get_user(user_id)
    if user is None:
        # Stale cookie for a deleted account
        request.session.clear()
        return None
    return Identity(user_id=user.user_id, username=user.username)


def get_current_user(identity=Depends(get_optional_user)) -> Identity:
    if identity is None:
        raise LoginRequired()
    return identity
