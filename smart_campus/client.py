"""Small HTTP client for the chatbot endpoint, shaped like the mobile app's chatbot service."""

from typing import Any, Dict, Optional

import requests

from smart_campus.utils.logging_utils import get_logger

logger = get_logger("client")

DEFAULT_BASE_URL = "http://localhost:5000/api"
DEFAULT_ERROR = "Failed to send message to chatbot"


class CampusChatbotClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def send_message(self, message: str, token: Optional[str] = None) -> Dict[str, Any]:
        """POST a message. Returns {"success": True, "data": ...} or {"success": False, "error": ...}."""
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            r = self.session.post(
                f"{self.base_url}/chatbot",
                json={"message": message},
                headers=headers,
                timeout=self.timeout,
            )
            r.raise_for_status()
            return {"success": True, "data": r.json()}
        except requests.HTTPError as e:
            logger.error(f"Chatbot service error: {e}")
            return {"success": False, "error": _server_message(e.response) or DEFAULT_ERROR}
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Chatbot service error: {e}")
            return {"success": False, "error": DEFAULT_ERROR}

    def status(self) -> Dict[str, Any]:
        r = self.session.get(f"{self.base_url}/chatbot/status", timeout=self.timeout)
        r.raise_for_status()
        return r.json()


def _server_message(response) -> Optional[str]:
    if response is None:
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return None
