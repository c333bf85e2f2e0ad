# leave_manager/config.py
import os
import pathlib

from dotenv import load_dotenv, find_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent

env_path = ROOT / ".env"
if not env_path.exists():
    env_path = find_dotenv()
load_dotenv(env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./leave_manager.db")

# Keep in sync with whatever issued tokens in other environments
JWT_SECRET = os.getenv("JWT_SECRET", "dev_secret_change_me")
TOKEN_EXPIRES_MINUTES = int(os.getenv("TOKEN_EXPIRES_MINUTES") or 120)

DOC_DIR = pathlib.Path(os.getenv("DOC_DIR") or (pathlib.Path.cwd() / "doc_data"))
WORKLOG_SUBDIR = "worklogs"
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES") or 20 * 1024 * 1024)

CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")

SEED_DEFAULT_USERS = os.getenv("SEED_DEFAULT_USERS", "1") in ("1", "true", "True")
DEBUG_AUTH = os.getenv("DEBUG_AUTH", "0") in ("1", "true", "True")
