"""Allow-list of email domains.

The registry is an immutable snapshot of ``EmailDomain`` entities, the
in-memory counterpart of a domain repository. Lookups compare normalized
(lowercase, trimmed) domains exactly; a subdomain is not allowed just
because its parent is.
"""
from collections import Counter
from typing import Dict, Iterable, List, Optional, Union

from academic_records.core.logging import get_logger
from academic_records.domain.base import DomainModel
from academic_records.domain.email_domain import EmailDomain
from academic_records.domain.validation import DomainValidationError, Guard

logger = get_logger(__name__)

_guard = Guard("EmailDomain")


class EmailValidationResult(DomainModel):
    """Outcome of checking one email address against the allow-list."""

    email: str
    domain: Optional[str] = None
    is_valid: bool
    is_allowed: bool
    message: str


class BulkEmailValidationResult(DomainModel):
    total: int
    valid: int
    invalid: int
    results: List[EmailValidationResult]


def _normalize(domain: str) -> str:
    return (domain or "").strip().lower()


class EmailDomainRegistry:
    """Immutable set of allowed email domains."""

    def __init__(self, domains: Iterable[Union[EmailDomain, str]] = ()):
        by_name: Dict[str, EmailDomain] = {}
        for item in domains:
            entity = item if isinstance(item, EmailDomain) else EmailDomain.create(item)
            if entity.domain in by_name:
                raise _guard.error(f"Domain {entity.domain} already exists")
            by_name[entity.domain] = entity
        self._domains = by_name

    def __len__(self) -> int:
        return len(self._domains)

    def __iter__(self):
        return iter(self._domains.values())

    def __contains__(self, domain: object) -> bool:
        return isinstance(domain, str) and _normalize(domain) in self._domains

    @property
    def domains(self) -> List[EmailDomain]:
        return list(self._domains.values())

    def get(self, domain: str) -> Optional[EmailDomain]:
        return self._domains.get(_normalize(domain))

    def with_domain(self, domain: Union[EmailDomain, str]) -> "EmailDomainRegistry":
        """New registry with ``domain`` added.

        Raises:
            DomainValidationError: Invalid or already registered domain
        """
        entity = domain if isinstance(domain, EmailDomain) else EmailDomain.create(domain)
        if entity.domain in self._domains:
            raise _guard.error(f"Domain {entity.domain} already exists")
        logger.info("Email domain added: %s", entity.domain, extra={"domain": entity.domain})
        return EmailDomainRegistry([*self._domains.values(), entity])

    # Allow-list checks

    def is_domain_allowed(self, domain: str) -> bool:
        return _normalize(domain) in self._domains

    def is_email_allowed(self, email: str) -> bool:
        """False for malformed emails instead of raising."""
        try:
            domain = EmailDomain.extract_domain_from_email(email)
        except DomainValidationError:
            return False
        return domain in self._domains

    def validate_email(self, email: str) -> EmailValidationResult:
        email = (email or "").strip()
        try:
            domain = EmailDomain.extract_domain_from_email(email)
        except DomainValidationError as exc:
            return EmailValidationResult(
                email=email, is_valid=False, is_allowed=False, message=exc.reason
            )

        is_allowed = domain in self._domains
        message = "Email domain is allowed" if is_allowed else "Email domain is not allowed"
        return EmailValidationResult(
            email=email, domain=domain, is_valid=True, is_allowed=is_allowed, message=message
        )

    def validate_emails(self, emails: Iterable[str]) -> BulkEmailValidationResult:
        """Validate each email; an email counts as valid only when allowed."""
        results = [self.validate_email(email) for email in emails]
        valid = sum(1 for result in results if result.is_allowed)
        logger.debug("Validated %d emails, %d allowed", len(results), valid)
        return BulkEmailValidationResult(
            total=len(results), valid=valid, invalid=len(results) - valid, results=results
        )

    # Queries

    def find_domains_matching_email(self, email: str) -> List[EmailDomain]:
        return [domain for domain in self._domains.values() if domain.matches_email(email)]

    def find_by_tld(self, tld: str) -> List[EmailDomain]:
        tld = _normalize(tld).lstrip(".")
        return [domain for domain in self._domains.values() if domain.get_tld() == tld]

    def find_subdomains_of(self, parent_domain: str) -> List[EmailDomain]:
        return [domain for domain in self._domains.values() if domain.is_subdomain_of(parent_domain)]

    def find_educational(self) -> List[EmailDomain]:
        return [domain for domain in self._domains.values() if domain.is_educational_domain()]

    def find_government(self) -> List[EmailDomain]:
        return [domain for domain in self._domains.values() if domain.is_government_domain()]

    def search(self, term: str) -> List[EmailDomain]:
        """Domains containing ``term``, sorted by name."""
        term = _normalize(term)
        return sorted(
            (domain for domain in self._domains.values() if term in domain.domain),
            key=lambda domain: domain.domain,
        )

    def statistics(self) -> Dict[str, object]:
        """Counts by classification plus per-TLD counts, most common first.

        ``commercial`` is whatever is neither educational nor government.
        """
        total = len(self._domains)
        educational = len(self.find_educational())
        government = len(self.find_government())
        by_tld = Counter(domain.get_tld() for domain in self._domains.values())
        return {
            "total": total,
            "educational": educational,
            "government": government,
            "commercial": total - educational - government,
            "by_tld": [{"tld": tld, "count": count} for tld, count in by_tld.most_common()],
        }
