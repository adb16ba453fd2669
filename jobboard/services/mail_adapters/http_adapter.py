import asyncio
import logging
from typing import Any, Dict

import httpx

from jobboard.core.config import settings

logger = logging.getLogger(__name__)


def check_config() -> None:
    if not settings.EMAIL_HTTP_URL:
        raise RuntimeError("EMAIL_HTTP_URL is not configured")


async def send_email(to: str, subject: str, html: str, sender: str) -> Dict[str, Any]:
    # Posts the message to a transactional email API (json in, json out)
    check_config()
    url = str(settings.EMAIL_HTTP_URL)
    headers = {}
    if settings.EMAIL_API_KEY:
        headers["Authorization"] = f"Bearer {settings.EMAIL_API_KEY}"
    body = {"from": sender, "to": to, "subject": subject, "html": html}

    attempts = max(1, settings.EMAIL_RETRIES + 1)
    last_exc: Exception = RuntimeError("email was not sent")
    async with httpx.AsyncClient(timeout=settings.EMAIL_TIMEOUT_SEC) as client:
        for attempt in range(1, attempts + 1):
            try:
                resp = await client.post(url, json=body, headers=headers)
                resp.raise_for_status()
                return resp.json() if resp.content else {}
            except httpx.HTTPError as exc:
                last_exc = exc
                logger.warning("email send attempt %d/%d failed: %r", attempt, attempts, exc)
                if attempt < attempts:
                    await asyncio.sleep(settings.EMAIL_BACKOFF_FACTOR * attempt)
    raise last_exc
