"""
Authentication routes
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse
from app.services.auth_service import AuthService
from app.services.errors import NotFound
from app.services.repositories import UserRepo
from app.utils.responses import rate_limit_error, success_response
from app.utils.security import CurrentUser, get_client_ip, get_current_user, rate_limit_check

router = APIRouter()

@router.post("/register")
async def register(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """Create a student or club account"""
    user = AuthService(db).register_user(user_data)
    return success_response(
        message="Account created successfully",
        data=UserResponse.model_validate(user),
        status_code=201
    )

@router.post("/login")
async def login(
    request: Request,
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """Exchange email and password for a bearer token"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip):
        rate_limit_error()

    token, user = AuthService(db).login(credentials.email, credentials.password)
    return success_response(
        message="Login successful",
        data=TokenResponse(token=token, user=UserResponse.model_validate(user))
    )

@router.get("/me")
async def me(
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Profile of the authenticated caller"""
    user = UserRepo(db).get_by_id(current.id)
    if not user:
        raise NotFound("User not found")
    return success_response(
        message="Profile retrieved",
        data=UserResponse.model_validate(user)
    )
