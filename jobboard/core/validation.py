# jobboard/core/validation.py
from typing import Any, Dict, List, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from jobboard.core.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


def _field_name(loc: Sequence[Any]) -> str:
    # drop the leading "body"/"query"/... segment FastAPI prepends
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "form")]
    return ".".join(parts) or "__root__"


def collect_errors(raw_errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into ``{field, message}`` pairs, one per field."""
    out: List[Dict[str, str]] = []
    seen = set()
    for err in raw_errors:
        field = _field_name(err.get("loc", ()))
        if field in seen:
            continue
        seen.add(field)
        out.append({"field": field, "message": err.get("msg", "invalid value")})
    return out


def parse_model(model_cls: Type[M], data: Dict[str, Any]) -> M:
    """Validate ``data`` against ``model_cls`` and report every violated field at once."""
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(errors=collect_errors(exc.errors())) from None
