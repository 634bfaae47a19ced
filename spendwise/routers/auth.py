import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from spendwise.core.exceptions import AuthenticationError, NotFoundError
from spendwise.core.responses import success_response
from spendwise.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_current_user_id,
    get_password_hash,
    verify_password,
)
from spendwise.db.users import UserStore
from spendwise.models.user import RefreshRequest, UserCreate, UserLogin, UserPublic
from spendwise.routers.deps import get_user_store

router = APIRouter()
logger = logging.getLogger(__name__)


def _issue_tokens(users: UserStore, user_id: str) -> dict:
    access_token = create_access_token(data={"sub": user_id})
    refresh_token = create_refresh_token(data={"sub": user_id})
    users.set_refresh_token(user_id, refresh_token)
    return {"accessToken": access_token, "refreshToken": refresh_token}


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, users: UserStore = Depends(get_user_store)):
    record = users.create(user.name, user.email, get_password_hash(user.password))
    tokens = _issue_tokens(users, record["user_id"])
    body = success_response(
        {"user": UserPublic.from_record(record).to_dict(), **tokens},
        message="User registered successfully",
    )
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=body)


@router.post("/login")
def login(login_data: UserLogin, users: UserStore = Depends(get_user_store)):
    logger.info(f"Login attempt for email: {login_data.email}")
    user = users.get_by_email(login_data.email)

    if not user or not verify_password(login_data.password, user["password_hash"]):
        logger.warning(f"Invalid credentials for: {login_data.email}")
        raise AuthenticationError("Invalid email or password")

    tokens = _issue_tokens(users, user["user_id"])
    logger.info(f"Login successful for user: {user['user_id']}")
    return success_response(
        {"user": UserPublic.from_record(user).to_dict(), **tokens},
        message="Login successful",
    )


@router.post("/refresh")
def refresh(payload: RefreshRequest, users: UserStore = Depends(get_user_store)):
    claims = decode_refresh_token(payload.refresh_token)
    user_id = claims.get("sub")
    try:
        user = users.get(user_id) if user_id else None
    except NotFoundError:
        raise AuthenticationError("Invalid refresh token")
    # only the most recently issued refresh token is accepted
    if not user or user.get("refresh_token") != payload.refresh_token:
        raise AuthenticationError("Invalid refresh token")

    return success_response(_issue_tokens(users, user_id), message="Token refreshed successfully")


@router.post("/logout")
def logout(user_id: str = Depends(get_current_user_id), users: UserStore = Depends(get_user_store)):
    users.set_refresh_token(user_id, None)
    return success_response(message="Logout successful")


@router.get("/profile")
def profile(user_id: str = Depends(get_current_user_id), users: UserStore = Depends(get_user_store)):
    """Get current user profile"""
    return success_response({"user": UserPublic.from_record(users.get(user_id)).to_dict()})
