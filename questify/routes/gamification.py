"""
Gamification HTTP routes: streaks, badges, stats and the dashboard quote.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from questify.database import get_db
from questify.schemas import StreakResponse, BadgeResponse
from questify.services.gamification_service import GamificationService
from questify.services.leaderboard_service import LeaderboardService

router = APIRouter(prefix="/api/gamification", tags=["gamification"])


@router.get("/streak/{user_id}", response_model=StreakResponse)
def get_streak(user_id: int, db: Session = Depends(get_db)):
    return GamificationService(db).get_streak(user_id)


@router.get("/badges/{user_id}")
def get_badges(user_id: int, db: Session = Depends(get_db)):
    """Get unlocked badges, most recent first."""
    badges = GamificationService(db).get_badges(user_id)
    return {"badges": [BadgeResponse(**badge) for badge in badges]}


@router.get("/stats/{user_id}")
def get_stats(user_id: int, db: Session = Depends(get_db)):
    """Get profile totals and current monthly rank."""
    return LeaderboardService(db).user_stats(user_id)


@router.get("/quote")
def get_quote(db: Session = Depends(get_db)):
    return {"quote": LeaderboardService(db).dashboard_quote()}
