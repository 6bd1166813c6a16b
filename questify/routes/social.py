"""
Social HTTP routes: friends, friend feed and nudges.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from questify.database import get_db
from questify.schemas import FriendRequest, RemoveFriendRequest, NudgeRequest
from questify.services.social_service import SocialService

router = APIRouter(prefix="/api/social", tags=["social"])


@router.post("/friends", status_code=status.HTTP_201_CREATED)
def add_friend(request: FriendRequest, db: Session = Depends(get_db)):
    """Add a friend by username (both directions)."""
    return SocialService(db).add_friend(request.user_id, request.friend_username)


@router.delete("/friends")
def remove_friend(request: RemoveFriendRequest, db: Session = Depends(get_db)):
    return SocialService(db).remove_friend(request.user_id, request.friend_id)


@router.get("/friends/{user_id}")
def list_friends(user_id: int, db: Session = Depends(get_db)):
    return {"friends": SocialService(db).list_friends(user_id)}


@router.get("/feed/{user_id}")
def get_feed(user_id: int, db: Session = Depends(get_db)):
    """Get friends' recent completions and goals they can be nudged about."""
    return SocialService(db).friend_feed(user_id)


@router.post("/nudge", status_code=status.HTTP_201_CREATED)
def send_nudge(request: NudgeRequest, db: Session = Depends(get_db)):
    """Send an AI-written nudge to a friend about an open goal."""
    return SocialService(db).send_nudge(request.from_user_id, request.to_user_id, request.goal_id)


@router.get("/nudges/{user_id}")
def get_nudges(user_id: int, db: Session = Depends(get_db)):
    return {"nudges": SocialService(db).get_nudges(user_id)}
