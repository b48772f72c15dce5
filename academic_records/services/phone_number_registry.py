"""Ordered collection of phone configurations and best-match search.

Registry order matters: both tiers of ``find_best_match`` return the first
hit in insertion order.
"""
from typing import Iterable, List, Optional

from academic_records.core.logging import get_logger
from academic_records.domain.base import DomainModel
from academic_records.domain.phone_number_config import PhoneNumberConfig, PhoneValidationResult
from academic_records.domain.validation import Guard
from academic_records.utils.text import strip_phone_formatting

logger = get_logger(__name__)

_guard = Guard("PhoneNumberConfig")


class PhoneMatchResult(DomainModel):
    """One phone number checked against every configuration.

    ``best_match`` is the first valid result in registry order.
    """

    phone_number: str
    is_valid: bool
    best_match: Optional[PhoneValidationResult] = None
    results: List[PhoneValidationResult]


class BulkPhoneValidationResult(DomainModel):
    total: int
    valid: int
    invalid: int
    results: List[PhoneMatchResult]


class PhoneNumberRegistry:
    """Immutable, ordered set of ``PhoneNumberConfig``; one per country code."""

    def __init__(self, configs: Iterable[PhoneNumberConfig] = ()):
        self._configs: List[PhoneNumberConfig] = []
        for config in configs:
            if any(existing.country_code == config.country_code for existing in self._configs):
                raise _guard.error(
                    f"Configuration for country code {config.country_code} already exists"
                )
            self._configs.append(config)

    def __len__(self) -> int:
        return len(self._configs)

    def __iter__(self):
        return iter(self._configs)

    @property
    def configs(self) -> List[PhoneNumberConfig]:
        return list(self._configs)

    def with_config(self, config: PhoneNumberConfig) -> "PhoneNumberRegistry":
        """New registry with ``config`` appended (lowest priority)."""
        return PhoneNumberRegistry([*self._configs, config])

    def find_by_country(self, country: str) -> List[PhoneNumberConfig]:
        return [config for config in self._configs if config.matches_country(country)]

    def find_by_country_code(self, country_code: str) -> Optional[PhoneNumberConfig]:
        for config in self._configs:
            if config.has_country_code(country_code):
                return config
        return None

    def validate_all(self, phone_number: str) -> List[PhoneValidationResult]:
        """One result per configuration, in registry order."""
        return [config.validate_phone_number(phone_number) for config in self._configs]

    def find_best_match(self, phone_number: str) -> Optional[PhoneNumberConfig]:
        """Pick the configuration for a number of unknown origin.

        Tier 1 returns the first configuration whose pattern accepts the
        number. Only if none does, tier 2 returns the first configuration
        whose country code (with or without ``+``) prefixes the number.
        Tier 2 can be ambiguous when codes prefix one another (``+1`` and
        ``+12``); the first hit still wins and a warning lists the rest.
        """
        for config in self._configs:
            if config.validate_phone_number(phone_number).is_valid:
                return config

        normalized = strip_phone_formatting(phone_number)
        if not normalized:
            return None

        candidates = [
            config
            for config in self._configs
            if normalized.startswith(config.country_code.replace("+", "", 1))
            or normalized.startswith(config.country_code)
        ]
        if not candidates:
            logger.debug("No phone configuration matches %s", normalized, extra={"phone_number": normalized})
            return None
        if len(candidates) > 1:
            logger.warning(
                "Ambiguous country code prefix for %s, using %s",
                normalized,
                candidates[0].get_display_name(),
                extra={
                    "phone_number": normalized,
                    "matches": [config.country_code for config in candidates],
                },
            )
        return candidates[0]

    def validate(self, phone_number: str) -> PhoneMatchResult:
        results = self.validate_all(phone_number)
        best_match = next((result for result in results if result.is_valid), None)
        return PhoneMatchResult(
            phone_number=phone_number or "",
            is_valid=best_match is not None,
            best_match=best_match,
            results=results,
        )

    def validate_many(self, phone_numbers: Iterable[str]) -> BulkPhoneValidationResult:
        results = [self.validate(phone_number) for phone_number in phone_numbers]
        valid = sum(1 for result in results if result.is_valid)
        return BulkPhoneValidationResult(
            total=len(results), valid=valid, invalid=len(results) - valid, results=results
        )
