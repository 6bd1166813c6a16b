from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from pathlib import Path

from questify.database import engine, Base
from questify import models  # Import all models to register them with Base
from questify.exceptions import QuestifyException, LedgerOperationException
from questify.error_handlers import questify_exception_handler, ledger_exception_handler
from questify.routes import users, goals, gamification, leaderboard, social
from questify.services.scheduler_service import start_scheduler, stop_scheduler
from questify.constants import (
    DEFAULT_LOG_DIRECTORY_PROD,
    DEFAULT_LOG_DIRECTORY_DEV,
    DEFAULT_LOG_FILE,
    CORS_ALLOWED_ORIGINS,
)

LOG_DIR = os.getenv("QUESTIFY_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("QUESTIFY_LOG_FILE", DEFAULT_LOG_FILE)
SCHEDULER_ENABLED = os.getenv("QUESTIFY_SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()  # Also log to console
    ]
)

logger = logging.getLogger("questify")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Questify API",
    description="Gamified goal tracking: points, streaks, badges and monthly leaderboards",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(LedgerOperationException, ledger_exception_handler)
app.add_exception_handler(QuestifyException, questify_exception_handler)

app.include_router(users.router)
app.include_router(goals.router)
app.include_router(gamification.router)
app.include_router(leaderboard.router)
app.include_router(social.router)

# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info(f"Questify API started. Logging to: {log_path}")
    if SCHEDULER_ENABLED:
        start_scheduler()

# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Questify API")
    stop_scheduler()

# Health check
@app.get("/")
async def root():
    return {"message": "Questify API", "status": "active"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("questify.main:app", host="0.0.0.0", port=8000, reload=False)
