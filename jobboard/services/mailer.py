# jobboard/services/mailer.py
"""
Pluggable email adapter loader and facade.

Environment:
- EMAIL_ADAPTER: "mock" (default) or "http"

Public:
- async def send_email(to: str, subject: str, html: str) -> dict
"""

import importlib
import logging
from typing import Any, Dict, Optional

from jobboard.core.config import settings

logger = logging.getLogger(__name__)

_ADAPTERS = {
    "mock": "jobboard.services.mail_adapters.mock_adapter",
    "http": "jobboard.services.mail_adapters.http_adapter",
}

_adapter = None


def _load_adapter(name: str):
    global _adapter
    mod = importlib.import_module(_ADAPTERS.get(name, name))
    # adapter module must implement async send_email
    if not hasattr(mod, "send_email"):
        raise RuntimeError(f"Adapter {name} does not expose send_email()")
    if hasattr(mod, "check_config"):
        mod.check_config()
    _adapter = mod
    return mod


def load_adapter(name: Optional[str] = None):
    """
    (Re)load the configured adapter. Only in development does an unusable
    adapter fall back to mock; elsewhere the error propagates so messages
    are never silently dropped.
    """
    name = name or settings.EMAIL_ADAPTER
    try:
        return _load_adapter(name)
    except Exception as exc:
        if settings.APP_ENV != "development":
            logger.error("email adapter %r unavailable: %s", name, exc)
            raise
        logger.error("email adapter %r unavailable (%s); using mock", name, exc)
        return _load_adapter("mock")


def get_adapter():
    if _adapter is None:
        load_adapter()
    return _adapter


async def send_email(to: str, subject: str, html: str) -> Dict[str, Any]:
    """
    Unified entry to the configured adapter. Delivery failures propagate:
    callers decide whether a failed send is fatal.
    """
    adapter = get_adapter()
    return await adapter.send_email(to, subject, html, sender=settings.EMAIL_FROM)
