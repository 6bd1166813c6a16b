"""
User HTTP routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from questify.database import get_db
from questify.schemas import UserCreate, UserResponse
from questify.services.gamification_service import GamificationService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    """Register a user with zeroed points and streaks."""
    return GamificationService(db).register_user(user.username, user.email)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return GamificationService(db).get_user(user_id)
