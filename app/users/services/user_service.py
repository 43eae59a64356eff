import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import ConflictError, UnauthorizedError, ValidationError
from app.core.security import hash_password, verify_password
from app.core.utils import CUSTOM_ID_ATTEMPTS, generate_custom_id
from app.users.models.user_model import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str):
        return self.db.query(User).filter(User.user_id == user_id).first()

    def get_by_username(self, username: str):
        return self.db.query(User).filter(User.username == username).first()

    def register(self, username: str, email: str, password: str):
        """Create an account. A taken username leaves the existing account untouched."""
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        if len(password.encode("utf-8")) > 72:
            # bcrypt only hashes the first 72 bytes
            raise ValidationError("Password must be at most 72 bytes")

        if self.get_by_username(username):
            logger.warning(f"⚠️ Registration rejected, username taken: {username}")
            raise ConflictError("Username taken")

        password_hash = hash_password(password)
        for _ in range(CUSTOM_ID_ATTEMPTS):
            user = User(
                user_id=generate_custom_id(self.db, User, "U", "user_id"),
                username=username,
                email=(email or "").strip() or None,
                password_hash=password_hash,
            )
            try:
                self.db.add(user)
                self.db.commit()
                break
            except IntegrityError:
                self.db.rollback()
                # Either the name or the generated id was taken by a concurrent registration
                if self.get_by_username(username):
                    raise ConflictError("Username taken")
                logger.warning(f"⚠️ User id {user.user_id} already taken, retrying")
            except Exception:
                self.db.rollback()
                raise
        else:
            raise ConflictError("Could not allocate a user id, please retry")

        self.db.refresh(user)
        logger.info(f"✅ Registered user {user.user_id} ({user.username})")
        return user

    def authenticate(self, username: str, password: str):
        user = self.get_by_username((username or "").strip())
        if not user or not verify_password(password or "", user.password_hash):
            logger.warning(f"⚠️ Failed login for {username}")
            raise UnauthorizedError("Invalid credentials")
        return user
