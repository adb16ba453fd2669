# jobboard/models/common.py
import math
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class Page(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def page_meta(page: Page, total: int) -> Dict[str, Any]:
    return {
        "page": page.page,
        "limit": page.limit,
        "total": total,
        "total_pages": math.ceil(total / page.limit) if total else 0,
        "has_more": page.page * page.limit < total,
    }


def utcnow() -> datetime:
    # naive UTC, the same representation pymongo hands back
    return datetime.utcnow()


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
