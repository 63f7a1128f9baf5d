import logging
import re

from smart_campus.config import Config

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("SmartCampus_Chatbot")

# Suppress noisy external libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("google_genai").setLevel(logging.WARNING)

# Patterns to mask
PATTERNS = {
    "EMAIL": (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b', '[EMAIL]'),
    "PHONE": (r'\b\d{3}[-.]?\d{3}[-.]?\d{4}\b', '[PHONE]'),
    "STUDENT_NUMBER": (r'\b\d{4,10}\b', '[STUDENT_ID]'),
}

def anonymize_text(text: str) -> str:
    """Mask PII in text"""
    if not isinstance(text, str):
        return str(text)

    for _, (pattern, replacement) in PATTERNS.items():
        text = re.sub(pattern, replacement, text)
    return text

def log_audit(action: str, user: str, details: str = ""):
    """Log an audit event with anonymization"""
    user_masked = anonymize_text(user)
    details_masked = anonymize_text(details)
    logger.info(f"AUDIT | Action: {action} | User: {user_masked} | Details: {details_masked}")

def get_logger(name: str = None):
    if name:
        return logger.getChild(name)
    return logger
