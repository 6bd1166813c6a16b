"""
Application-wide constants.
Game rules, default configuration values and fixed vocabularies.
"""

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/questify"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "app.log"

# Database
DEFAULT_DATABASE_URL = "sqlite:///./questify.db"

# CORS (React dev servers)
CORS_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
]

# Goal frequencies
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
GOAL_FREQUENCIES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY)

# Points tariff per completion
POINTS_DAILY_COMPLETION = 10
POINTS_WEEKLY_COMPLETION = 50

# Badge types
BADGE_FIRST_STEPS = "First Steps"
BADGE_WEEK_WARRIOR = "Week Warrior"
BADGE_MONTHLY_MASTER = "Monthly Master"
BADGE_GOAL_CRUSHER = "Goal Crusher"
BADGE_SOCIAL_BUTTERFLY = "Social Butterfly"
BADGE_HELPING_HAND = "Helping Hand"
BADGE_COMEBACK_KID = "Comeback Kid"
BADGE_LEADERBOARD_CHAMPION = "Leaderboard King/Queen"

ALL_BADGE_TYPES = (
    BADGE_FIRST_STEPS,
    BADGE_WEEK_WARRIOR,
    BADGE_MONTHLY_MASTER,
    BADGE_GOAL_CRUSHER,
    BADGE_SOCIAL_BUTTERFLY,
    BADGE_HELPING_HAND,
    BADGE_COMEBACK_KID,
    BADGE_LEADERBOARD_CHAMPION,
)

# Badge thresholds
FIRST_STEPS_TASKS = 1
WEEK_WARRIOR_STREAK = 7
MONTHLY_MASTER_STREAK = 30
GOAL_CRUSHER_GOALS = 5
SOCIAL_BUTTERFLY_FRIENDS = 10
HELPING_HAND_NUDGES = 20
COMEBACK_KID_STREAK = 3

# Pacing
FAILURE_ALERT_GAP_THRESHOLD = 0.20
DAYS_PER_WEEK = 7

# Leaderboard
LEADERBOARD_TOP_SIZE = 10
LEADERBOARD_HISTORY_MONTHS = 12

# Social
FRIEND_FEED_SIZE = 20
FRIEND_FEED_INCOMPLETE_SIZE = 10
NUDGES_INBOX_SIZE = 10

# Text generation
MESSAGE_COMPLETION = "completion"
MESSAGE_NUDGE = "nudge"
MESSAGE_FAILURE_ALERT = "failure_alert"
MESSAGE_DASHBOARD_QUOTE = "dashboard_quote"
MESSAGE_BADGE_UNLOCK = "badge_unlock"
MESSAGE_KINDS = (
    MESSAGE_COMPLETION,
    MESSAGE_NUDGE,
    MESSAGE_FAILURE_ALERT,
    MESSAGE_DASHBOARD_QUOTE,
    MESSAGE_BADGE_UNLOCK,
)

TEXT_PROVIDER_GEMINI = "gemini"
TEXT_PROVIDER_STATIC = "static"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
TEXT_GENERATION_TIMEOUT_SECONDS = 10
