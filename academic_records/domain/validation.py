"""Validation toolkit shared by every domain model.

A ``Guard`` is bound to one entity name and raises
``DomainValidationError`` tagged with that name, e.g.
``"Student validation error: Student ID must be 8 digits"``.

``DomainValidationError`` does not derive from ``ValueError``:
pydantic only wraps ``ValueError``/``AssertionError`` raised inside
validators, so this error surfaces to callers unchanged.
"""
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import TypeAdapter, ValidationError


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_DATE_ADAPTER = TypeAdapter(date)
_DATETIME_ADAPTER = TypeAdapter(datetime)


class DomainValidationError(Exception):
    """A domain invariant was violated.

    Attributes:
        entity_name: Name of the model that rejected the input
        reason: Human-readable reason without the entity prefix
    """

    def __init__(self, entity_name: str, reason: str):
        self.entity_name = entity_name
        self.reason = reason
        super().__init__(f"{entity_name} validation error: {reason}")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


class Guard:
    """Validation guards raising errors tagged with ``entity_name``."""

    def __init__(self, entity_name: str):
        self.entity_name = entity_name

    def error(self, reason: str) -> DomainValidationError:
        """Build (not raise) a validation error for this entity."""
        return DomainValidationError(self.entity_name, reason)

    def is_required(self, value: Any, field_name: str) -> None:
        if _is_blank(value):
            raise self.error(f"{field_name} is required")

    def min_length(self, value: Optional[str], min_len: int, field_name: str) -> None:
        if not value or len(value) < min_len:
            raise self.error(f"{field_name} must be at least {min_len} characters long")

    def max_length(self, value: Optional[str], max_len: int, field_name: str) -> None:
        if value and len(value) > max_len:
            raise self.error(f"{field_name} must not exceed {max_len} characters")

    def is_valid_email(self, email: Any, field_name: str = "Email") -> None:
        if not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip()):
            raise self.error(f"{field_name} format is invalid")

    def as_date(self, value: Any, field_name: str) -> date:
        """Coerce ``value`` to a ``date`` or raise "must be a valid date".

        Accepts ``date``, ``datetime`` (time part dropped) and anything
        pydantic can parse as a date, such as ISO strings.
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if value is None or isinstance(value, bool):
            raise self.error(f"{field_name} must be a valid date")
        if isinstance(value, str) and "T" in value:
            try:
                return _DATETIME_ADAPTER.validate_python(value).date()
            except ValidationError:
                raise self.error(f"{field_name} must be a valid date") from None
        try:
            return _DATE_ADAPTER.validate_python(value)
        except ValidationError:
            raise self.error(f"{field_name} must be a valid date") from None

    def is_valid_past_date(self, value: Any, field_name: str) -> date:
        """Coerce to a date and reject dates after today."""
        parsed = self.as_date(value, field_name)
        if parsed > date.today():
            raise self.error(f"{field_name} cannot be in the future")
        return parsed

    def is_in_allowed_values(self, value: Any, allowed_values: Iterable[Any], field_name: str) -> None:
        allowed = [v.value if isinstance(v, Enum) else v for v in allowed_values]
        candidate = value.value if isinstance(value, Enum) else value
        if candidate not in allowed:
            raise self.error(f"{field_name} must be one of: {', '.join(str(v) for v in allowed)}")
