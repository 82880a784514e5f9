from typing import Any, Dict, Iterable, List, Optional
import re

from app.core.exceptions import RecordValidationError

def validate_email_format(email: str) -> bool:
    """Validate email format."""
    if not email:
        return True  # Allow empty/null

    email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(email_pattern, email))


def validate_url_format(url: str) -> bool:
    """Validate URL format. Only the scheme is checked."""
    if not url:
        return True  # Allow empty/null

    return bool(re.match(r'^https?://\S+$', url))


def parse_comma_separated(value: Optional[str]) -> List[str]:
    """Split ``"a, b,,c"`` into ``["a", "b", "c"]``."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def require_text(data: Dict[str, Any], fields: Iterable[str]) -> List[str]:
    """Return an error for each field that is missing or blank."""
    errors = []
    for field in fields:
        value = data.get(field)
        if value is None or not str(value).strip():
            errors.append(f"{field} is required")
    return errors


def validate_record(
    data: Dict[str, Any],
    required: Iterable[str] = (),
    urls: Iterable[str] = (),
    emails: Iterable[str] = (),
) -> List[str]:
    """Collect validation errors for a record about to be written."""
    errors = require_text(data, required)

    for field in urls:
        if field in data and not validate_url_format(data[field]):
            errors.append(f"{field} must be a valid http(s) URL")

    for field in emails:
        if field in data and not validate_email_format(data[field]):
            errors.append(f"{field} must be a valid email address")

    return errors


def validate_and_raise(
    data: Dict[str, Any],
    required: Iterable[str] = (),
    urls: Iterable[str] = (),
    emails: Iterable[str] = (),
) -> None:
    """Validate record data and raise exception if errors found."""
    errors = validate_record(data, required=required, urls=urls, emails=emails)
    if errors:
        raise RecordValidationError(errors)
