"""
Authentication and profile endpoints for API v1.

Registration and login return a bearer token together with the user.
Password hashes are never included in responses.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from franchise_hub_api.app.api.v1.errors import service_errors
from franchise_hub_api.app.core.security import create_access_token, get_current_user
from franchise_hub_api.app.schemas.user import (
    ProfileUpdate,
    Token,
    User,
    UserCreate,
    UserLogin,
    UserRead,
    UserRole,
)
from franchise_hub_api.app.services.user_service import UserService


router = APIRouter()


def _token_for(user: User) -> Token:
    access_token = create_access_token({"sub": user.email})
    return Token(access_token=access_token, user=UserRead.model_validate(user))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate) -> Token:
    """Register a business owner or partner and log them in."""
    with service_errors():
        user = await UserService.create_user(data)
    return _token_for(user)


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin) -> Token:
    user = await UserService.authenticate(credentials.email, credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_for(user)


@router.get("/me", response_model=UserRead)
async def read_me(current_user: dict = Depends(get_current_user)) -> UserRead:
    with service_errors():
        user = await UserService.get_user_by_id(current_user["user_id"])
    return UserRead.model_validate(user)


@router.put("/profile", response_model=UserRead)
async def update_profile(
    data: ProfileUpdate, current_user: dict = Depends(get_current_user)
) -> UserRead:
    with service_errors():
        user = await UserService.update_profile(current_user["user_id"], data)
    return UserRead.model_validate(user)


@router.get("/users", response_model=List[UserRead])
async def list_users(
    role: UserRole | None = None, current_user: dict = Depends(get_current_user)
) -> List[UserRead]:
    users = await UserService.list_users(role)
    return [UserRead.model_validate(u) for u in users]


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(user_id: str, current_user: dict = Depends(get_current_user)) -> UserRead:
    with service_errors():
        user = await UserService.get_user_by_id(user_id)
    return UserRead.model_validate(user)
