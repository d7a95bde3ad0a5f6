import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Backend REST API (the base URL always ends with a single /api)
BACKEND_API_URL = os.getenv("BACKEND_API_URL", "http://localhost:5000")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

# Database (local archive of generated documents and imports)
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'data' / 'console.db'}")

# Paths
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", BASE_DIR / "output"))
DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))

OUTPUT_SUBDIRS = ["payroll", "forms", "salary", "bonus", "templates", "reports"]

# Application settings
DEBUG = os.getenv("DEBUG", "False").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Uploaded spreadsheets
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
MAX_REQUEST_BYTES = int(os.getenv("MAX_REQUEST_BYTES", MAX_UPLOAD_BYTES * 2))

# Flask session secret
SECRET_KEY = os.getenv("SECRET_KEY", "dev-console-secret-change-me")


def ensure_directories():
    """Create output and data directories"""
    for name in OUTPUT_SUBDIRS:
        (OUTPUT_DIR / name).mkdir(parents=True, exist_ok=True)
    DATA_DIR.mkdir(parents=True, exist_ok=True)
