"""Allowed email domain entity.

Holds one normalized domain (``"student.hcmus.edu.vn"``) and answers the
hierarchy and classification questions the allow-list needs: subdomain or
parent relations, TLD, base domain, educational and government domains.
"""
import re
from typing import Any, ClassVar, Dict

from pydantic import model_validator

from academic_records.core.logging import get_logger
from academic_records.domain.base import DomainEntity
from academic_records.domain.validation import DomainValidationError, Guard
from academic_records.utils.dates import utcnow

logger = get_logger(__name__)

_guard = Guard("EmailDomain")

MIN_DOMAIN_LENGTH = 3
MAX_DOMAIN_LENGTH = 255

DOMAIN_PATTERN = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
TLD_PATTERN = re.compile(r"^[a-zA-Z]{2,}$")
EMAIL_DOMAIN_PATTERN = re.compile(r"^[^\s@]+@([^\s@]+\.[^\s@]+)$")

EDUCATIONAL_SUFFIXES = ("edu", "ac", "edu.vn", "ac.vn")
GOVERNMENT_SUFFIXES = ("gov", "gov.vn", "mil")


def _has_suffix(domain: str, suffixes) -> bool:
    return any(domain == suffix or domain.endswith("." + suffix) for suffix in suffixes)


class EmailDomain(DomainEntity):
    """One allowed email domain, stored lowercase and trimmed."""

    entity_name: ClassVar[str] = "EmailDomain"

    domain: str

    @model_validator(mode="before")
    @classmethod
    def _validate_props(cls, data: Any) -> Any:
        if isinstance(data, EmailDomain):
            return data
        props = dict(cls._canonical(data or {}))
        domain = props.get("domain")
        if not isinstance(domain, str) or not domain.strip():
            raise _guard.error("Domain is required")
        props["domain"] = domain.strip().lower()
        return props

    @model_validator(mode="after")
    def _validate_business_rules(self) -> "EmailDomain":
        self._validate_domain_format()
        self._validate_domain_length()
        return self

    def _validate_domain_format(self) -> None:
        domain = self.domain
        if not DOMAIN_PATTERN.match(domain):
            raise _guard.error(
                "Invalid domain format. Domain must contain only letters, numbers, dots, and hyphens"
            )

        labels = domain.split(".")
        if len(labels) < 2:
            raise _guard.error("Domain must have at least one dot (e.g., example.com)")

        if not TLD_PATTERN.match(labels[-1]):
            raise _guard.error(
                "Domain must end with a valid top-level domain (letters only, min 2 characters)"
            )

        if ".." in domain or "--" in domain:
            raise _guard.error("Domain cannot contain consecutive dots or hyphens")

        if domain[0] in ".-" or domain[-1] in ".-":
            raise _guard.error("Domain cannot start or end with dots or hyphens")

    def _validate_domain_length(self) -> None:
        if len(self.domain) < MIN_DOMAIN_LENGTH:
            raise _guard.error(f"Domain must be at least {MIN_DOMAIN_LENGTH} characters long")
        if len(self.domain) > MAX_DOMAIN_LENGTH:
            raise _guard.error(f"Domain cannot exceed {MAX_DOMAIN_LENGTH} characters")

    # Hierarchy and classification queries

    def matches_email(self, email: str) -> bool:
        """True if ``email``'s host is exactly this domain; never raises."""
        if not email:
            return False
        try:
            return self.domain == EmailDomain.extract_domain_from_email(email)
        except DomainValidationError:
            return False

    def is_subdomain_of(self, parent_domain: str) -> bool:
        if not parent_domain:
            return False
        return self.domain.endswith("." + parent_domain.strip().lower())

    def is_parent_domain_of(self, subdomain: str) -> bool:
        if not subdomain:
            return False
        return subdomain.strip().lower().endswith("." + self.domain)

    def get_tld(self) -> str:
        return self.domain.split(".")[-1]

    def get_base_domain(self) -> str:
        """Last two labels: ``mail.google.com`` -> ``google.com``."""
        labels = self.domain.split(".")
        if len(labels) <= 2:
            return self.domain
        return ".".join(labels[-2:])

    def is_educational_domain(self) -> bool:
        return _has_suffix(self.domain, EDUCATIONAL_SUFFIXES)

    def is_government_domain(self) -> bool:
        return _has_suffix(self.domain, GOVERNMENT_SUFFIXES)

    # Factories and email helpers

    @classmethod
    def create(cls, domain: str) -> "EmailDomain":
        now = utcnow()
        return cls(domain=domain, created_at=now, updated_at=now)

    @staticmethod
    def extract_domain_from_email(email: str) -> str:
        """Return the lowercase host part of ``local@host.tld``.

        Raises:
            DomainValidationError: Empty email or not of that shape
        """
        if not isinstance(email, str) or not email.strip():
            raise _guard.error("Email is required")
        match = EMAIL_DOMAIN_PATTERN.match(email.strip())
        if not match:
            raise _guard.error("Invalid email format")
        return match.group(1).lower()

    @classmethod
    def validate_and_extract_domain(cls, email: str) -> str:
        """Extract the host of ``email`` and check it is a valid domain."""
        domain = cls.extract_domain_from_email(email)
        cls(domain=domain)
        return domain

    @classmethod
    def is_valid_email_format(cls, email: str) -> bool:
        try:
            cls.extract_domain_from_email(email)
        except DomainValidationError:
            return False
        return True

    @classmethod
    def from_legacy_data(cls, data: Dict[str, Any]) -> "EmailDomain":
        """Load a stored domain without re-running the hostname grammar.

        The domain is normalized and must be non-empty; nothing else is
        checked. Only for records read back from storage.
        """
        props = cls._canonical(data)
        domain = str(props.get("domain") or "").strip().lower()
        if not domain:
            raise _guard.error("Domain is required")
        email_domain = cls.model_construct(
            id=cls._legacy_id(props),
            domain=domain,
            created_at=cls._legacy_timestamp(props.get("created_at")),
            updated_at=cls._legacy_timestamp(props.get("updated_at")),
        )
        logger.debug(
            "Email domain %s reconstructed from legacy data",
            domain,
            extra={"entity": cls.entity_name, "domain": domain},
        )
        return email_domain

    def to_plain_object(self) -> Dict[str, Any]:
        data = super().to_plain_object()
        data.update(
            tld=self.get_tld(),
            baseDomain=self.get_base_domain(),
            isEducational=self.is_educational_domain(),
            isGovernment=self.is_government_domain(),
        )
        return data
