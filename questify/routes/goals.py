"""
Goal HTTP routes: creation, completion, deletion and progress.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from questify.database import get_db
from questify.schemas import (
    GoalCreate, GoalResponse,
    CompleteTaskRequest, CompleteTaskResponse, DeleteGoalResponse,
    ProgressResponse, FailureAlertResponse
)
from questify.services.gamification_service import GamificationService

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(goal: GoalCreate, db: Session = Depends(get_db)):
    """Create a daily or weekly goal."""
    return GamificationService(db).create_goal(
        user_id=goal.user_id,
        title=goal.title,
        description=goal.description,
        category=goal.category,
        frequency=goal.frequency,
        deadline=goal.deadline
    )


@router.post("/complete", response_model=CompleteTaskResponse)
def complete_task(request: CompleteTaskRequest, db: Session = Depends(get_db)):
    """Complete a goal for the current period. 409 if already done."""
    return GamificationService(db).complete_task(
        request.goal_id, request.user_id, request.frequency
    )


@router.get("/progress/{user_id}", response_model=ProgressResponse)
def get_progress(user_id: int, db: Session = Depends(get_db)):
    """Get today's daily and this week's weekly completion."""
    return GamificationService(db).get_progress(user_id)


@router.get("/failure-alerts/{user_id}", response_model=List[FailureAlertResponse])
def get_failure_alerts(user_id: int, db: Session = Depends(get_db)):
    """Get goals that are falling behind their deadline pace."""
    return GamificationService(db).get_failure_alerts(user_id)


@router.get("/{user_id}", response_model=List[GoalResponse])
def get_goals(user_id: int, db: Session = Depends(get_db)):
    return GamificationService(db).get_goals(user_id)


@router.delete("/{goal_id}", response_model=DeleteGoalResponse)
def delete_goal(
    goal_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db)
):
    """Delete a goal and refund the points it earned."""
    return GamificationService(db).delete_goal(goal_id, user_id)
