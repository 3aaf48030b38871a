"""Input validation helpers for tool arguments.

Every value that ends up inside a URL path must pass ``validate_identifier``
before the request is built. The remaining helpers follow the same rule:
reject and raise ``ValidationError``, never sanitize and continue.
"""
from __future__ import annotations
import re
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import urlparse

from .zitadel.exceptions import ValidationError

# Zitadel IDs are numeric strings; letters, "-" and "_" are tolerated for
# other backends' identifiers. Nothing that could alter a URL path.
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
SLUG_PATTERN = re.compile(r"[a-z0-9-]+")
EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")

EMAIL_MAX_LENGTH = 254
DEFAULT_LIMIT = 50
MAX_LIMIT = 500


def validate_identifier(value: Any, label: str = "ID") -> str:
    """Validate an identifier that will be interpolated into a request path.

    Args:
        value: Raw argument value
        label: Argument name used in the error message

    Returns:
        The identifier, unchanged

    Raises:
        ValidationError: If value is missing, empty, or not strictly alphanumeric
    """
    if value is None or value == "":
        raise ValidationError(f"{label} is required", field=label)
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string", field=label)
    # fullmatch: "$" would let a trailing newline through
    if not IDENTIFIER_PATTERN.fullmatch(value):
        raise ValidationError(
            f"{label} must be alphanumeric (letters, digits, '-' and '_' only)",
            field=label,
        )
    return value


def require_string(params: Mapping[str, Any], field: str) -> str:
    """Return a required, non-empty string argument."""
    value = params.get(field)
    if value is None or value == "":
        raise ValidationError(f"{field} is required", field=field)
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    if not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value


def optional_string(params: Mapping[str, Any], field: str) -> Optional[str]:
    """Return an optional string argument, or None when absent."""
    value = params.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    return value


def optional_identifier(params: Mapping[str, Any], field: str) -> Optional[str]:
    """Return an optional identifier, validated when present and non-empty."""
    value = params.get(field)
    if value is None or value == "":
        return None
    return validate_identifier(value, field)


def validate_email(params: Mapping[str, Any], field: str = "email") -> str:
    """Validate email format (basic RFC 5322 shape, max 254 chars)."""
    email = require_string(params, field).strip()
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"{field} must not exceed {EMAIL_MAX_LENGTH} characters", field=field)
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValidationError(f"{field} format is invalid", field=field)
    return email


def validate_limit(
    params: Mapping[str, Any],
    field: str = "limit",
    default: int = DEFAULT_LIMIT,
    minimum: int = 1,
    maximum: int = MAX_LIMIT,
) -> int:
    """Validate a bounded integer argument such as a page size."""
    value = params.get(field)
    if value is None:
        return default
    # bool is an int subclass; JSON clients may send 50.0 for 50
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number", field=field)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} must be a whole number", field=field)
        value = int(value)
    if value < minimum or value > maximum:
        raise ValidationError(f"{field} must be between {minimum} and {maximum}", field=field)
    return value


def validate_boolean(params: Mapping[str, Any], field: str, default: Optional[bool] = None) -> Optional[bool]:
    """Validate an optional boolean flag."""
    value = params.get(field)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean", field=field)
    return value


def validate_choice(
    params: Mapping[str, Any],
    field: str,
    choices: Iterable[str],
    default: str,
) -> str:
    """Validate an enumerated string argument."""
    value = params.get(field)
    if value is None or value == "":
        return default
    allowed = tuple(choices)
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}", field=field)
    return value


def validate_url(value: Any, field: str) -> str:
    """Validate an absolute URL (scheme and host required)."""
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field} must be a valid URL", field=field)
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc or any(ch.isspace() for ch in value):
        raise ValidationError(f"{field} must be a valid URL", field=field)
    return value


def validate_string_list(
    params: Mapping[str, Any],
    field: str,
    *,
    required: bool = False,
    urls: bool = False,
) -> Optional[list[str]]:
    """Validate a list of non-empty strings (optionally URLs).

    Returns None when the argument is absent and not required.
    """
    value = params.get(field)
    if value is None:
        if required:
            raise ValidationError(f"{field} is required", field=field)
        return None
    if not isinstance(value, list):
        raise ValidationError(f"{field} must be an array of strings", field=field)
    if required and not value:
        raise ValidationError(f"{field} must contain at least one entry", field=field)

    items: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item:
            raise ValidationError(f"{field} must contain only non-empty strings", field=field)
        items.append(validate_url(item, field) if urls else item)
    return items


def validate_slug(params: Mapping[str, Any], field: str = "slug") -> str:
    """Validate a URL-safe slug (lowercase letters, digits, hyphens)."""
    slug = require_string(params, field)
    if not SLUG_PATTERN.fullmatch(slug):
        raise ValidationError(
            "Slug must be lowercase letters, numbers, and hyphens only",
            field=field,
        )
    return slug
