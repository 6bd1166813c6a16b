from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import List, Optional

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255)

class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    total_points: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True

class GoalBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None  # fitness, learning, personal...
    frequency: str = Field(default="daily", pattern="^(daily|weekly)$")
    deadline: Optional[date] = None

class GoalCreate(GoalBase):
    user_id: int

class GoalResponse(GoalBase):
    id: int
    user_id: int
    created_at: datetime

    class Config:
        from_attributes = True

class CompleteTaskRequest(BaseModel):
    goal_id: int
    user_id: int
    frequency: Optional[str] = Field(None, pattern="^(daily|weekly)$")

class UnlockedBadge(BaseModel):
    badge: str
    message: str

class CompleteTaskResponse(BaseModel):
    points_earned: int
    new_streak: int
    badges_unlocked: List[UnlockedBadge] = []
    message: str

class DeleteGoalResponse(BaseModel):
    points_refunded: int

class CompletionSummary(BaseModel):
    completed: int
    total: int
    percentage: int

class ProgressResponse(BaseModel):
    daily: CompletionSummary
    weekly: CompletionSummary

class FailureAlertResponse(BaseModel):
    goal_id: int
    goal_title: str
    days_behind: int
    expected_completion: int
    actual_completion: int
    ai_message: str

class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date] = None

class BadgeResponse(BaseModel):
    badge_type: str
    unlocked_at: datetime

class FriendRequest(BaseModel):
    user_id: int
    friend_username: str = Field(..., min_length=1)

class RemoveFriendRequest(BaseModel):
    user_id: int
    friend_id: int

class NudgeRequest(BaseModel):
    from_user_id: int
    to_user_id: int
    goal_id: int

class RolloverRequest(BaseModel):
    # Archive an explicit month instead of the previous one
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000)
