"""
Authentication endpoints - signup, login, logout and session check
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from cinegrok.app.core.config import settings
from cinegrok.app.core.dependencies import get_db, get_optional_user
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.user import User
from cinegrok.app.schemas.user import (
    SessionResponse,
    TokenResponse,
    UserLogin,
    UserResponse,
    UserSignup,
)
from cinegrok.app.services.auth_service import AuthService

logger = get_logger("api.auth")

router = APIRouter()


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )


def _token_response(result: dict) -> TokenResponse:
    return TokenResponse(
        access_token=result["access_token"],
        token_type=result["token_type"],
        user=UserResponse.model_validate(result["user"]),
        message=result["message"],
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserSignup, response: Response, db: Session = Depends(get_db)):
    """
    Create an account and log in

    - **email**: must be unique
    - **password**: at least 6 characters
    - **full_name**: optional
    """
    try:
        result = AuthService.register_user(db, user_data)
        if not result["success"]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=result["message"],
            )
        _set_auth_cookie(response, result["access_token"])
        return _token_response(result)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Signup failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration error",
        )


@router.post("/login", response_model=TokenResponse)
def login(login_data: UserLogin, response: Response, db: Session = Depends(get_db)):
    """
    Login user and get access token (also set as an HTTP-only cookie)
    """
    try:
        result = AuthService.login_user(db, login_data)
        if not result["success"]:
            logger.warning("Login rejected email=%s reason=%s", login_data.email, result["message"])
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=result["message"],
                headers={"WWW-Authenticate": "Bearer"},
            )
        _set_auth_cookie(response, result["access_token"])
        return _token_response(result)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Login failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login error",
        )


@router.post("/logout")
def logout(response: Response):
    """Clear the auth cookie. Bearer tokens simply expire."""
    response.delete_cookie(settings.auth_cookie_name)
    return {"success": True}


@router.get("/me", response_model=SessionResponse)
def me(
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    """Current session user, or {"user": null}. Never 401 so it can be polled."""
    if not current_user:
        return SessionResponse(user=None)
    return SessionResponse(user=AuthService.session_user(db, current_user))
