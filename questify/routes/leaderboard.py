"""
Leaderboard HTTP routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from questify.database import get_db
from questify.schemas import RolloverRequest
from questify.services.gamification_service import GamificationService
from questify.services.leaderboard_service import LeaderboardService

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("/current")
def get_current_leaderboard(user_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Get this month's top 10 and the caller's rank."""
    return LeaderboardService(db).current_leaderboard(user_id)


@router.get("/all-time")
def get_all_time_leaderboard(db: Session = Depends(get_db)):
    return {"leaderboard": LeaderboardService(db).all_time_leaderboard()}


@router.get("/history/{user_id}")
def get_leaderboard_history(user_id: int, db: Session = Depends(get_db)):
    """Get the user's last 12 archived months."""
    return {"history": LeaderboardService(db).leaderboard_history(user_id)}


@router.post("/reset")
def reset_leaderboard(request: Optional[RolloverRequest] = None, db: Session = Depends(get_db)):
    """Run the monthly rollover now (normally triggered by the scheduler)."""
    request = request or RolloverRequest()
    return GamificationService(db).run_monthly_rollover(month=request.month, year=request.year)
