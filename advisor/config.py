from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# -----------------------------------------
#  Environment (.env at the project root)
# -----------------------------------------
_CURRENT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = _CURRENT_DIR.parent
load_dotenv(PROJECT_ROOT / ".env")

# -----------------------------------------
#  MongoDB
# -----------------------------------------
MONGO_URI = os.getenv("MONGO_URI")
MONGODB_HOST = os.getenv("MONGO_HOST", "127.0.0.1")
MONGODB_PORT = int(os.getenv("MONGO_PORT", "27017"))
MONGODB_USERNAME = os.getenv("MONGO_USER")
MONGODB_PASSWORD = os.getenv("MONGO_PASSWORD")
MONGODB_AUTH_SOURCE = os.getenv("MONGO_AUTH_SOURCE", "admin")
MONGODB_DB_NAME = os.getenv("MONGO_DB", "career_advisor")
MONGODB_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "30000"))

# -----------------------------------------
#  SSH tunnel (optional, only when MONGO_SSH_HOST is set)
# -----------------------------------------
SSH_HOST = os.getenv("MONGO_SSH_HOST")
SSH_PORT = int(os.getenv("MONGO_SSH_PORT", "22"))
SSH_USERNAME = os.getenv("MONGO_SSH_USER", "ubuntu")
SSH_PEM_KEY_PATH = Path(os.getenv("MONGO_SSH_KEY_PATH", str(PROJECT_ROOT / "secrets" / "mongo.pem")))

# -----------------------------------------
#  Service behaviour
# -----------------------------------------
SEARCH_HISTORY_LIMIT = int(os.getenv("SEARCH_HISTORY_LIMIT", "100"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SERVICE_NAME = "career-advisor-recommendation"
SERVICE_VERSION = "1.0.0"

# uvicorn bind address when started with `python server.py`
SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))
