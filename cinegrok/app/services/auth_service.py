"""
Authentication service business logic
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.models.user import User
from cinegrok.app.schemas.user import SessionUser, UserSignup, UserLogin
from cinegrok.app.core.security import verify_password, get_password_hash, create_access_token

logger = get_logger("services.auth")


def _issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def register_user(db: Session, user_data: UserSignup):
        """Register a new user; the new user is logged in straight away."""
        existing_user = db.query(User).filter(User.email == user_data.email).first()
        if existing_user:
            return {"success": False, "message": "Email already registered"}

        new_user = User(
            email=user_data.email,
            full_name=(user_data.full_name or "").strip() or None,
            hashed_password=get_password_hash(user_data.password),
        )
        try:
            db.add(new_user)
            db.commit()
            db.refresh(new_user)
        except IntegrityError:
            db.rollback()
            return {"success": False, "message": "Email already registered"}

        logger.info("User registered user_id=%s", new_user.id)
        return {
            "success": True,
            "user": new_user,
            "message": "User registered successfully",
            "access_token": _issue_token(new_user),
            "token_type": "bearer",
        }

    @staticmethod
    def login_user(db: Session, login_data: UserLogin):
        """Authenticate user and return access token"""
        user = db.query(User).filter(User.email == login_data.email.strip().lower()).first()

        if not user or not verify_password(login_data.password, user.hashed_password):
            return {"success": False, "message": "Invalid email or password"}

        if not user.is_active:
            return {"success": False, "message": "User account is inactive"}

        logger.info("User logged in user_id=%s", user.id)
        return {
            "success": True,
            "access_token": _issue_token(user),
            "token_type": "bearer",
            "user": user,
            "message": "Login successful",
        }

    @staticmethod
    def session_user(db: Session, user: User) -> SessionUser:
        filmmaker = db.query(Filmmaker).filter(Filmmaker.user_id == user.id).first()
        return SessionUser(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            hasProfile=filmmaker is not None,
            filmmakerId=filmmaker.id if filmmaker else None,
        )
