from fastapi import APIRouter, Depends
from tripplanner.database.supabase_client import get_supabase
from tripplanner.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
)
from tripplanner.modules.auth.service import AuthService
from tripplanner.modules.profiles.service import ProfileService
from tripplanner.core.dependencies import get_auth_service, get_current_token, get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and drop the cached session"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """Get current authenticated user and their profile (null until the profile row exists)."""
    profile = ProfileService(supabase).find_profile(current_user["id"])
    return {**current_user, "profile": profile.model_dump() if profile else None}
