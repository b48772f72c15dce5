"""Per-country phone number configuration.

A ``PhoneNumberConfig`` pairs a country, its calling code and a validation
pattern. Patterns imported from older records are often malformed, so
every pattern goes through ``normalize_regex_pattern`` before it is
validated and compiled.
"""
import re
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import model_validator

from academic_records.core.logging import get_logger
from academic_records.domain.base import DomainEntity, DomainModel
from academic_records.domain.validation import Guard
from academic_records.utils.dates import utcnow
from academic_records.utils.text import strip_phone_formatting

logger = get_logger(__name__)

_guard = Guard("PhoneNumberConfig")

MIN_COUNTRY_LENGTH = 2
MAX_COUNTRY_LENGTH = 100
MIN_COUNTRY_CODE_LENGTH = 2
MAX_COUNTRY_CODE_LENGTH = 5
MAX_REGEX_LENGTH = 500

COUNTRY_PATTERN = re.compile(r"^[a-zA-ZÀ-ỹ\s\-]+$")
COUNTRY_CODE_PATTERN = re.compile(r"^\+\d{1,4}$")

# Known legacy pattern defects, applied in this order
_UNESCAPED_PLUS_GROUP = re.compile(r"\(\+(\d+)")
_BARE_DIGIT_QUANTIFIER = re.compile(r"(?<!\\)d\{")
_REPEATED_ESCAPE = re.compile(r"\\{2,}(?=[d+])")

_DIGIT_CLASS = re.compile(r"\\d|\[0-9\]|\d")
_LENGTH_CONSTRAINT = re.compile(r"\{\d+\}|\{\d+,\d*\}|\+|\*")


def normalize_regex_pattern(pattern: str) -> str:
    r"""Repair the malformed pattern shapes found in legacy records.

    - ``(+84`` becomes ``(\+84``
    - a bare ``d{`` becomes ``\d{``
    - ``\\d`` / ``\\+`` (repeated backslashes) collapse to one backslash

    The rewrite is idempotent. Shapes outside this list are left alone and
    surface later as a compile error.
    """
    normalized = _UNESCAPED_PLUS_GROUP.sub(r"(\\+\1", pattern)
    normalized = _BARE_DIGIT_QUANTIFIER.sub(r"\\d{", normalized)
    normalized = _REPEATED_ESCAPE.sub(r"\\", normalized)
    return normalized


def _normalize_logged(pattern: str, country: Any) -> str:
    normalized = normalize_regex_pattern(pattern)
    if normalized != pattern:
        logger.warning(
            'Auto-fixed regex pattern: "%s" -> "%s"',
            pattern,
            normalized,
            extra={
                "entity": "PhoneNumberConfig",
                "country": country,
                "original_pattern": pattern,
                "pattern": normalized,
            },
        )
    return normalized


class PhoneValidationResult(DomainModel):
    """Outcome of checking one phone number against one configuration."""

    is_valid: bool
    country: str
    country_code: str
    normalized_number: str
    format: str
    message: Optional[str] = None


class PhoneNumberConfig(DomainEntity):
    """Phone number rules for one country.

    Attributes:
        country: Country name (letters, spaces, hyphens)
        country_code: Calling code such as ``+84``
        regex: Normalized validation pattern
    """

    entity_name: ClassVar[str] = "PhoneNumberConfig"

    country: str
    country_code: str
    regex: str

    @model_validator(mode="before")
    @classmethod
    def _validate_props(cls, data: Any) -> Any:
        if isinstance(data, PhoneNumberConfig):
            return data
        props = dict(cls._canonical(data or {}))
        _guard.is_required(props.get("country"), "Country")
        _guard.is_required(props.get("country_code"), "Country code")
        _guard.is_required(props.get("regex"), "Regex pattern")

        props["country"] = str(props["country"]).strip()
        props["country_code"] = str(props["country_code"]).strip()
        props["regex"] = _normalize_logged(str(props["regex"]).strip(), props["country"])
        return props

    @model_validator(mode="after")
    def _validate_business_rules(self) -> "PhoneNumberConfig":
        self._validate_country()
        self._validate_country_code()
        self._validate_regex_pattern()
        return self

    def _validate_country(self) -> None:
        if len(self.country) < MIN_COUNTRY_LENGTH:
            raise _guard.error(
                f"Country name must be at least {MIN_COUNTRY_LENGTH} characters long"
            )
        if len(self.country) > MAX_COUNTRY_LENGTH:
            raise _guard.error(f"Country name cannot exceed {MAX_COUNTRY_LENGTH} characters")
        if not COUNTRY_PATTERN.match(self.country):
            raise _guard.error("Country name can only contain letters, spaces, and hyphens")

    def _validate_country_code(self) -> None:
        if len(self.country_code) < MIN_COUNTRY_CODE_LENGTH:
            raise _guard.error(
                f"Country code must be at least {MIN_COUNTRY_CODE_LENGTH} characters long"
            )
        if len(self.country_code) > MAX_COUNTRY_CODE_LENGTH:
            raise _guard.error(
                f"Country code cannot exceed {MAX_COUNTRY_CODE_LENGTH} characters"
            )
        if not COUNTRY_CODE_PATTERN.match(self.country_code):
            raise _guard.error(
                "Country code must start with + followed by 1-4 digits (e.g., +84, +1)"
            )

    def _validate_regex_pattern(self) -> None:
        if len(self.regex) > MAX_REGEX_LENGTH:
            raise _guard.error(f"Regex pattern cannot exceed {MAX_REGEX_LENGTH} characters")
        try:
            re.compile(self.regex)
        except re.error as exc:
            logger.error(
                "Invalid regex pattern: %s (%s)",
                self.regex,
                exc,
                extra={"entity": self.entity_name, "country": self.country, "pattern": self.regex},
            )
            raise _guard.error(f"Invalid regex pattern: {self.regex}. Error: {exc}") from None

        # Weak patterns are accepted but reported
        if not _DIGIT_CLASS.search(self.regex):
            logger.warning(
                "Phone number regex should include digit patterns for better validation",
                extra={"entity": self.entity_name, "country": self.country, "pattern": self.regex},
            )
        if not _LENGTH_CONSTRAINT.search(self.regex):
            logger.warning(
                "Phone regex pattern should include length constraints for better validation",
                extra={"entity": self.entity_name, "country": self.country, "pattern": self.regex},
            )

    # Business methods

    def validate_phone_number(self, phone_number: str) -> PhoneValidationResult:
        """Check ``phone_number`` against this pattern; never raises.

        Separators are stripped before matching. A pattern that does not
        compile (possible only for legacy-loaded configs) yields an invalid
        result rather than an exception.
        """
        if not phone_number or not str(phone_number).strip():
            return self._result(False, "", "Phone number is required")

        normalized = strip_phone_formatting(phone_number)
        try:
            is_valid = re.search(self.regex, normalized) is not None
        except re.error:
            return self._result(False, normalized, "Invalid regex pattern in configuration")

        message = "Valid phone number" if is_valid else f"Phone number format is invalid for {self.country}"
        return self._result(is_valid, normalized, message)

    def _result(self, is_valid: bool, normalized: str, message: str) -> PhoneValidationResult:
        return PhoneValidationResult(
            is_valid=is_valid,
            country=self.country,
            country_code=self.country_code,
            normalized_number=normalized,
            format=self.regex,
            message=message,
        )

    def matches_country(self, country_name: str) -> bool:
        """Case-insensitive containment in either direction."""
        if not country_name or not country_name.strip():
            return False
        wanted = country_name.strip().lower()
        own = self.country.lower()
        return wanted in own or own in wanted

    def has_country_code(self, country_code: str) -> bool:
        if not country_code or not country_code.strip():
            return False
        code = country_code.strip()
        if not code.startswith("+"):
            code = "+" + code
        return self.country_code == code

    def get_display_name(self) -> str:
        return f"{self.country} ({self.country_code})"

    def is_international_format(self) -> bool:
        r"""The pattern references the escaped calling code (``\+84``)."""
        return self.country_code.replace("+", "\\+") in self.regex

    def is_local_format(self) -> bool:
        """The pattern anchors on a local trunk ``0`` or a digit class."""
        return "^0" in self.regex or "^[0-9]" in self.regex

    def get_supported_formats(self) -> List[str]:
        formats = []
        if self.is_international_format():
            formats.append(f"International: {self.country_code}XXXXXXXXX")
        if self.is_local_format():
            formats.append("Local: 0XXXXXXXXX")
        return formats or ["Custom format"]

    def update_country_code(self, country_code: str) -> "PhoneNumberConfig":
        return PhoneNumberConfig(
            country=self.country,
            country_code=country_code,
            regex=self.regex,
            **self._carry_over(),
        )

    def update_regex(self, regex: str) -> "PhoneNumberConfig":
        """New config with ``regex`` normalized and revalidated."""
        return PhoneNumberConfig(
            country=self.country,
            country_code=self.country_code,
            regex=regex,
            **self._carry_over(),
        )

    @classmethod
    def create(cls, country: str, country_code: str, regex: str) -> "PhoneNumberConfig":
        now = utcnow()
        return cls(country=country, country_code=country_code, regex=regex, created_at=now, updated_at=now)

    @classmethod
    def from_legacy_data(cls, data: Dict[str, Any]) -> "PhoneNumberConfig":
        """Load a stored configuration without format or compile checks.

        Required fields must be present and the pattern is still
        normalized. A pattern that does not compile is kept (and logged) so
        the record stays readable; ``validate_phone_number`` then reports
        every number as invalid. Only for records read back from storage.
        """
        props = cls._canonical(data)
        _guard.is_required(props.get("country"), "Country")
        _guard.is_required(props.get("country_code"), "Country code")
        _guard.is_required(props.get("regex"), "Regex pattern")

        country = str(props["country"]).strip()
        regex = _normalize_logged(str(props["regex"]).strip(), country)
        try:
            re.compile(regex)
        except re.error as exc:
            logger.warning(
                "Legacy phone configuration for %s has an invalid pattern: %s",
                country,
                exc,
                extra={"entity": cls.entity_name, "country": country, "pattern": regex},
            )

        return cls.model_construct(
            id=cls._legacy_id(props),
            country=country,
            country_code=str(props["country_code"]).strip(),
            regex=regex,
            created_at=cls._legacy_timestamp(props.get("created_at")),
            updated_at=cls._legacy_timestamp(props.get("updated_at")),
        )

    def to_plain_object(self) -> Dict[str, Any]:
        data = super().to_plain_object()
        data.update(
            displayName=self.get_display_name(),
            supportedFormats=self.get_supported_formats(),
            isInternational=self.is_international_format(),
            isLocal=self.is_local_format(),
        )
        return data
