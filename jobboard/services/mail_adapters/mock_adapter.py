import asyncio
import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

# every message "sent" by this adapter; tests read and clear it
OUTBOX: List[Dict[str, Any]] = []


async def send_email(to: str, subject: str, html: str, sender: str) -> Dict[str, Any]:
    await asyncio.sleep(0)  # yield
    message = {"from": sender, "to": to, "subject": subject, "html": html}
    OUTBOX.append(message)
    logger.info("mock email to=%s subject=%r", to, subject)
    return {"id": f"mock-{len(OUTBOX)}", "accepted": [to]}
