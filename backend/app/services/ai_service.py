import base64
from typing import Any, Dict, Optional

import httpx
import structlog

from app.core.config import settings

logger = structlog.get_logger()

MOCK_ANALYSIS = """**Mock AI Analysis:**
- **Animal Type:** Suspected domestic dog.
- **Observed Condition:** Laceration visible on the left hind leg. Animal appears distressed.
- **Urgency:** Moderate. Recommend prompt attention.
- **First Aid Suggestion (for user):** Do not approach if the animal is aggressive. If safe, provide water and keep a safe distance. Do not attempt to treat the wound directly. Await professional help."""

FALLBACK_ANALYSIS = "Could not analyze the image. Please assess the situation based on the user's description."

TRIAGE_PROMPT = """Analyze the attached image of an animal and the user's description. Provide a brief report for an animal rescue NGO.
The report should include:
1.  A likely identification of the animal type.
2.  An assessment of the visible injury or condition.
3.  An estimated urgency level (e.g., Low, Moderate, High).
4.  A short, safe first-aid suggestion for the user to follow while waiting for the NGO. Emphasize user safety.

User's description: "{description}\""""


class TriageService:
    """
    Gemini vision triage for new rescue reports.
    Never raises: report creation must not depend on the AI being up.
    """

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    @classmethod
    async def _call_gemini(cls, payload: Dict[str, Any]) -> Optional[str]:
        """
        Private safe wrapper for the generateContent call.
        """
        url = f"{cls.BASE_URL}/{settings.GEMINI_MODEL}:generateContent"
        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    url,
                    params={"key": settings.GEMINI_API_KEY},
                    json=payload,
                    timeout=settings.TRIAGE_TIMEOUT_SECONDS,
                )
                if response.status_code != 200:
                    logger.error("gemini_api_error", status=response.status_code, body=response.text[:500])
                    return None

                data = response.json()
                parts = data["candidates"][0]["content"]["parts"]
                text = "".join(part.get("text", "") for part in parts).strip()
                return text or None

            except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
                logger.error("gemini_request_failed", error=str(e))
                return None

    @classmethod
    async def analyze(cls, photo: bytes, mime_type: str, description: str) -> str:
        if not settings.GEMINI_API_KEY:
            logger.warning("gemini_api_key_missing")
            return MOCK_ANALYSIS

        payload = {
            "contents": [{
                "parts": [
                    {
                        "inline_data": {
                            "mime_type": mime_type,
                            "data": base64.b64encode(photo).decode("utf-8"),
                        }
                    },
                    {"text": TRIAGE_PROMPT.format(description=description)},
                ]
            }]
        }

        result = await cls._call_gemini(payload)
        if result is None:
            logger.warning("triage_failed", fallback=True)
            return FALLBACK_ANALYSIS
        return result
