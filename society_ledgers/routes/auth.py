from fastapi import APIRouter, Depends, HTTPException, status

from society_ledgers.core.auth import create_access_token, get_current_user
from society_ledgers.core.security import verify_password
from society_ledgers.db.mongo import get_db
from society_ledgers.models.user import User
from society_ledgers.repositories.user_repo import UserRepository
from society_ledgers.schemas.auth import SignInRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signin", response_model=TokenResponse)
async def signin(credentials: SignInRequest, db = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    user = await UserRepository(db).get_user_by_email(credentials.email)
    if not user or not user.is_active or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    return TokenResponse(
        access_token=create_access_token(user),
        user=UserResponse.from_user(user)
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user details."""
    return UserResponse.from_user(current_user)
