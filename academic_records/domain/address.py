"""Address value object."""
from typing import Any, ClassVar, Optional

from pydantic import model_validator

from academic_records.domain.base import DomainModel
from academic_records.domain.validation import Guard
from academic_records.utils.text import clean_optional


_guard = Guard("Address")

# (field, label, max length) for the optional components
_OPTIONAL_PARTS = (
    ("street_address", "Street address", 200),
    ("ward", "Ward", 100),
    ("district", "District", 100),
    ("city", "City", 100),
)


class Address(DomainModel):
    """Postal address; only the country is mandatory.

    Compared by value. ``update_with`` returns a new address.
    """

    entity_name: ClassVar[str] = "Address"

    street_address: Optional[str] = None
    ward: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    country: str

    @model_validator(mode="before")
    @classmethod
    def _validate_props(cls, data: Any) -> Any:
        if isinstance(data, Address):
            return data
        if not isinstance(data, dict):
            raise _guard.error("Address must be a mapping of address fields")
        props = cls._canonical(data)

        country = props.get("country")
        if country is None or str(country).strip() == "":
            raise _guard.error("Country is required for address")
        props["country"] = str(country).strip()
        if len(props["country"]) < 2:
            raise _guard.error("Country must be at least 2 characters long")

        for field, label, limit in _OPTIONAL_PARTS:
            props[field] = clean_optional(props.get(field))
            _guard.max_length(props[field], limit, label)

        return props

    @property
    def full_address(self) -> str:
        parts = [self.street_address, self.ward, self.district, self.city, self.country]
        return ", ".join(part for part in parts if part)

    @property
    def is_complete(self) -> bool:
        return bool(self.city and self.country)

    def update_with(self, **changes: Any) -> "Address":
        props = self.model_dump()
        props.update(self._canonical(changes))
        return Address(**props)
