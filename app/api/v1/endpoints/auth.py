from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.api.deps.database import get_db
from app.models.user import User
from app.schemas.user import UserResponse
from app.services.auth import AuthService

router = APIRouter()
security = HTTPBearer(auto_error=False)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    return UserResponse.model_validate(user)


@router.post("/setup", response_model=UserResponse)
async def setup_new_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
):
    """
    Setup new user account after Descope signup.
    Links an existing account by email or creates a new one.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    user_info = await AuthService.validate_descope_token(credentials.credentials)

    user = await AuthService.get_or_create_user_from_descope(
        descope_user_id=user_info["descope_user_id"],
        email=user_info["email"],
        name=user_info["name"],
        db=db,
    )
    return UserResponse.model_validate(user)
