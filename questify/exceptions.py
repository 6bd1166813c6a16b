"""
Custom exceptions for the Questify engine.
Provides specific exception types so callers can tell user-correctable
conditions from store failures.
"""


class QuestifyException(Exception):
    """Base exception for Questify application"""
    pass


class NotFoundException(QuestifyException):
    """Raised when a referenced entity does not exist"""
    pass


class UserNotFoundException(NotFoundException):
    """Raised when a user is not found"""
    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class GoalNotFoundException(NotFoundException):
    """Raised when a goal is not found or is not owned by the user"""
    def __init__(self, goal_id: int, user_id: int = None):
        self.goal_id = goal_id
        self.user_id = user_id
        if user_id is None:
            super().__init__(f"Goal with ID {goal_id} not found")
        else:
            super().__init__(f"Goal with ID {goal_id} not found for user {user_id}")


class DuplicateCompletionException(QuestifyException):
    """Raised when a goal was already completed for the current period"""
    def __init__(self, goal_id: int, user_id: int, period_key):
        self.goal_id = goal_id
        self.user_id = user_id
        self.period_key = period_key
        super().__init__(
            f"Goal {goal_id} already completed by user {user_id} "
            f"for period starting {period_key}"
        )


class NotFriendsException(QuestifyException):
    """Raised when a social action needs a friendship that does not exist"""
    def __init__(self, user_id: int, friend_id: int):
        self.user_id = user_id
        self.friend_id = friend_id
        super().__init__(f"User {user_id} is not friends with user {friend_id}")


class DependencyUnavailableException(QuestifyException):
    """Raised when the text generation service fails or times out"""
    def __init__(self, service: str, details: str):
        self.service = service
        self.details = details
        super().__init__(f"{service} unavailable: {details}")


class InconsistentRefundException(QuestifyException):
    """Raised when a refund is larger than the balance it is taken from"""
    def __init__(self, user_id: int, refund: int, balance: int):
        self.user_id = user_id
        self.refund = refund
        self.balance = balance
        super().__init__(
            f"Refund of {refund} points exceeds balance {balance} for user {user_id}"
        )


class LedgerOperationException(QuestifyException):
    """
    Raised when the store fails during a ledger operation.

    ambiguous=False means the transaction was rolled back and nothing changed.
    ambiguous=True means the failure happened while committing, so the caller
    has to re-read state before retrying.
    """
    def __init__(self, operation: str, details: str, ambiguous: bool = False):
        self.operation = operation
        self.details = details
        self.ambiguous = ambiguous
        super().__init__(f"Ledger {operation} failed: {details}")


class ValidationException(QuestifyException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")
