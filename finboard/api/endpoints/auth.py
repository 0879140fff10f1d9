import re
import logging
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from finboard.crud import create_user, get_user_by_id, get_user_by_username
from finboard.database import get_db
from finboard.schemas import (
    LoginResponse,
    ProfileResponse,
    RegisterResponse,
    Token,
    UserCredentials,
    UserOut,
)
from finboard.security import create_access_token, get_current_user, hash_password, verify_password

router = APIRouter()
logger = logging.getLogger(__name__)

USERNAME_RE = re.compile(r"[a-zA-Z0-9_]+")

def validate_username(username: Any) -> Optional[str]:
    if not username or not isinstance(username, str):
        return "Username is required and must be a string"
    if len(username.strip()) < 3:
        return "Username must be at least 3 characters long"
    if len(username.strip()) > 30:
        return "Username must be less than 30 characters"
    if not USERNAME_RE.fullmatch(username):
        return "Username can only contain letters, numbers, and underscores"
    return None

def validate_password(password: Any) -> Optional[str]:
    if not password or not isinstance(password, str):
        return "Password is required and must be a string"
    if len(password) < 6:
        return "Password must be at least 6 characters long"
    if len(password) > 100:
        return "Password must be less than 100 characters"
    return None

def _check_credentials(credentials: UserCredentials) -> None:
    for field, error in (
        ("username", validate_username(credentials.username)),
        ("password", validate_password(credentials.password)),
    ):
        if error:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": error, "field": field}
            )

async def _authenticate(db: AsyncSession, username: str, password: str):
    user = await get_user_by_username(db, username.strip())
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid username or password", "field": "credentials"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

def _issue_token(user) -> str:
    return create_access_token(data={"sub": str(user.id), "username": user.username})

@router.post("/api/auth/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    credentials: UserCredentials,
    db: AsyncSession = Depends(get_db)
):
    """Create a dashboard account"""
    _check_credentials(credentials)
    username = credentials.username.strip()

    duplicate = HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "error": "Username already exists. Please choose a different username.",
            "field": "username"
        }
    )
    if await get_user_by_username(db, username):
        raise duplicate

    try:
        user = await create_user(db, username, hash_password(credentials.password))
    except IntegrityError:
        await db.rollback()
        raise duplicate
    except Exception:
        logger.exception("Registration error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register user. Please try again later."
        )

    logger.info(f"Registered user {user.username}")
    return RegisterResponse(message="User registered successfully", user=UserOut.model_validate(user))

@router.post("/api/auth/login", response_model=LoginResponse)
async def login(
    credentials: UserCredentials,
    db: AsyncSession = Depends(get_db)
):
    """Exchange username and password for a bearer token"""
    _check_credentials(credentials)
    user = await _authenticate(db, credentials.username, credentials.password)
    return LoginResponse(
        message="Login successful",
        token=_issue_token(user),
        user=UserOut.model_validate(user)
    )

@router.post("/api/auth/token", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    """
    OAuth2 password flow, used by the interactive API docs.
    """
    user = await _authenticate(db, form_data.username, form_data.password)
    return {"access_token": _issue_token(user), "token_type": "bearer"}

@router.get("/api/auth/profile", response_model=ProfileResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Return the account behind the bearer token"""
    user = await get_user_by_id(db, int(user_id)) if user_id.isdigit() else None
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return ProfileResponse(message="Profile retrieved successfully", user=UserOut.model_validate(user))
