"""
Runtime configuration for the What-If backend.

All settings come from environment variables and are read once when this
module is imported. Defaults are suitable for local development with SQLite.
"""

import os

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Relational store (PostgreSQL in production, SQLite locally and in tests)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./whatif.db")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", os.path.join(PROJECT_ROOT, "logs"))

# Frontend base URL used to build the results link returned on create
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")

# Comma-separated list of origins allowed to call the API
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


def results_url(case_id: str) -> str:
    """Build the frontend URL where a simulation set's results are shown."""
    return f"{FRONTEND_URL}/results/{case_id}"
