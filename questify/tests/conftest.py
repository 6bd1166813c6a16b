"""
Shared fixtures: an in-memory database, a pinned calendar and factories.
"""
import os
import tempfile

# Configure the app before any questify module reads the environment
os.environ.setdefault("QUESTIFY_DATABASE_URL", "sqlite://")
os.environ.setdefault("QUESTIFY_LOG_DIR", tempfile.mkdtemp(prefix="questify-logs-"))
os.environ["QUESTIFY_TEXT_PROVIDER"] = "static"
os.environ["QUESTIFY_SCHEDULER_ENABLED"] = "false"

import pytest
from datetime import date, datetime, time, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from questify.database import Base
from questify.models import User, Goal, Completion
from questify.services.date_service import DateService
from questify.services.points_service import PointsAccountant
from questify.services.text_generation import TextGenerator, TextProvider
from questify.exceptions import DependencyUnavailableException


class FakeTextProvider(TextProvider):
    """Answers every prompt with a fixed reply and records the prompts"""

    def __init__(self, reply: str = "You're doing great!"):
        self.reply = reply
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


class FailingTextProvider(TextProvider):
    """Fails like an unreachable backend"""

    def __init__(self):
        self.calls = 0

    def generate(self, prompt: str) -> str:
        self.calls += 1
        raise DependencyUnavailableException("fake", "timed out")


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def today():
    # A Wednesday; its week starts on Sunday 2024-03-10
    return date(2024, 3, 13)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def date_service(today):
    return DateService(reference_date=today)


@pytest.fixture
def text_provider():
    return FakeTextProvider()


@pytest.fixture
def text_generator(text_provider):
    return TextGenerator(text_provider)


@pytest.fixture
def make_user(db_session):
    """Factory for committed users with zeroed counters unless overridden"""
    counter = {"n": 0}

    def _make_user(username=None, **fields):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        values = {
            "email": f"{username}@example.com",
            "total_points": 0,
            "current_streak": 0,
            "longest_streak": 0,
            "created_at": datetime(2024, 1, 1, 12, 0) + timedelta(minutes=counter["n"]),
        }
        values.update(fields)
        user = User(username=username, **values)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_goal(db_session, today):
    """Factory for committed goals, created at 09:00 a week before today by default"""

    def _make_goal(user, frequency="daily", title=None, category="fitness", **fields):
        values = {
            "created_at": datetime.combine(today - timedelta(days=7), time(9, 0)),
        }
        values.update(fields)
        goal = Goal(
            user_id=user.id,
            title=title or f"{frequency} goal",
            category=category,
            frequency=frequency,
            **values
        )
        db_session.add(goal)
        db_session.commit()
        return goal

    return _make_goal


@pytest.fixture
def make_completion(db_session):
    """Factory for completions inserted directly, bypassing the ledger"""

    def _make_completion(goal, completed_date):
        completion = Completion(
            goal_id=goal.id,
            user_id=goal.user_id,
            completed_date=completed_date,
            period_key=DateService.get_period_key(goal.frequency, completed_date),
            points_earned=PointsAccountant.tariff(goal.frequency),
        )
        db_session.add(completion)
        db_session.commit()
        return completion

    return _make_completion
