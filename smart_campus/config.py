import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}

def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default

def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default

def _env_list(name: str, default: str) -> list:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]

PRODUCTION_ENVS = {"production", "prod"}

class Config:
    # Deployment
    APP_ENV = os.getenv("APP_ENV", "production").strip().lower()
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = _env_int("PORT", 5000)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = _env_list("CORS_ORIGINS", "*")

    # Security
    # Optional: without it bearer tokens are never trusted and every caller is anonymous.
    SECRET_KEY = os.getenv("SECRET_KEY")

    # AI Environment
    # Keep backward compatibility with older GOOGLE_API_KEY naming.
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    AI_TIMEOUT_SECONDS = max(0.1, _env_float("AI_TIMEOUT_SECONDS", 15.0))
    AI_ENABLED = _env_bool("AI_ENABLED", True)

    # Institution
    INSTITUTION_NAME = os.getenv("INSTITUTION_NAME", "KLH University")
    INSTITUTION_KEYWORD = os.getenv("INSTITUTION_KEYWORD", "klh").strip().lower()

    # Monitoring
    METRICS_MAX_AGE_HOURS = max(1, _env_int("METRICS_MAX_AGE_HOURS", 24))
    METRICS_CLEANUP_INTERVAL_SECONDS = max(1.0, _env_float("METRICS_CLEANUP_INTERVAL_SECONDS", 3600))

    @classmethod
    def is_production(cls, app_env: str = None) -> bool:
        env = (app_env if app_env is not None else cls.APP_ENV) or ""
        return env.strip().lower() in PRODUCTION_ENVS
