# ==========================================================================================================
# -------------- Configuration file for the Mining Admin Console -------------------------------------------
# ==========================================================================================================
import os
from dotenv import load_dotenv


if os.environ.get("FLASK_ENV") != "production":
    load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:

    FLASK_ENV = os.getenv("FLASK_ENV", "development")
    DEBUG = os.getenv("DEBUG", "False").lower() in ("true", "1", "t")

    SECRET_KEY = os.getenv("SECRET_KEY")
    if not SECRET_KEY:
        if FLASK_ENV == "production":
            raise ValueError("SECRET_KEY must be set in production")
        SECRET_KEY = "dev_key_change_me"

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = FLASK_ENV == "production"

    # Remote mining-app admin API
    ADMIN_API_BASE_URL = os.getenv("ADMIN_API_BASE_URL", "http://localhost:5002/api/admin").rstrip("/")
    REQUEST_TIMEOUT_SECONDS = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))
    API_MAX_RETRIES = int(os.getenv("API_MAX_RETRIES", "0"))

    # View behaviour
    ADMIN_PAGE_SIZE = int(os.getenv("ADMIN_PAGE_SIZE", "10"))
    SEARCH_DEBOUNCE_SECONDS = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.5"))
    MAX_ACTIVE_BANNERS = int(os.getenv("MAX_ACTIVE_BANNERS", "2"))
    DEFAULT_MINING_CYCLE_HOURS = float(os.getenv("DEFAULT_MINING_CYCLE_HOURS", "24"))

    # Diagnostics (check_db.py / check_transactions.py)
    MONGODB_URI = os.getenv("MONGODB_URI")
    MONGODB_DB = os.getenv("MONGODB_DB", "mining-app")

    LOG_DIR = os.getenv("LOG_DIR", os.path.join(basedir, "logs"))


class TestingConfig(Config):
    TESTING = True
    SEARCH_DEBOUNCE_SECONDS = 0
    SECRET_KEY = "testing"
    SESSION_COOKIE_SECURE = False
    ADMIN_API_BASE_URL = "http://api.test/api/admin"
