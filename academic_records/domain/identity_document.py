"""Identity document value objects.

Three document kinds share the common fields and date rules and differ in
their number format:

* ``OldNationalId`` (CMND) - 9 or 12 digits
* ``NewNationalId`` (CCCD) - 12 digits, optional embedded chip
* ``Passport`` - 6-9 alphanumerics plus issuing country

``IdentityDocument`` is the union of the three and
``create_identity_document`` is the one place that picks a variant from the
``type`` tag.
"""
import re
from datetime import date, timedelta
from enum import Enum
from typing import Any, ClassVar, Dict, Literal, Optional, Union

from pydantic import model_validator

from academic_records.domain.base import DomainModel
from academic_records.domain.validation import Guard
from academic_records.utils.text import clean_optional


_guard = Guard("IdentityDocument")


class IdentityDocumentType(str, Enum):
    """Document kind tag as stored in student records."""
    CMND = "CMND"
    CCCD = "CCCD"
    PASSPORT = "Hộ chiếu"


class IdentityDocumentBase(DomainModel):
    """Fields and rules common to every identity document.

    Attributes:
        type: Variant tag
        number: Document number (trimmed)
        issue_date: Date of issue, never in the future
        issue_place: Issuing authority or place
        expiry_date: Strictly after ``issue_date``
    """

    entity_name: ClassVar[str] = "IdentityDocument"

    document_type: ClassVar[IdentityDocumentType]
    number_pattern: ClassVar[re.Pattern]
    number_message: ClassVar[str]

    type: IdentityDocumentType
    number: str
    issue_date: date
    issue_place: str
    expiry_date: date

    @model_validator(mode="before")
    @classmethod
    def _validate_props(cls, data: Any) -> Any:
        if isinstance(data, IdentityDocumentBase):
            return data
        if not isinstance(data, dict):
            raise _guard.error("Identity document is required")
        props = cls._canonical(data)
        props["type"] = cls.document_type

        number = props.get("number")
        if number is None or str(number).strip() == "":
            raise _guard.error("Document number is required")
        issue_place = props.get("issue_place")
        if issue_place is None or str(issue_place).strip() == "":
            raise _guard.error("Issue place is required")

        issue_date = _guard.as_date(props.get("issue_date"), "Issue date")
        expiry_date = _guard.as_date(props.get("expiry_date"), "Expiry date")
        if issue_date > date.today():
            raise _guard.error("Issue date cannot be in the future")
        if expiry_date <= issue_date:
            raise _guard.error("Expiry date must be after issue date")

        props["number"] = str(number).strip()
        props["issue_place"] = str(issue_place).strip()
        props["issue_date"] = issue_date
        props["expiry_date"] = expiry_date

        cls._validate_number(props["number"])
        return cls._validate_variant(props)

    @classmethod
    def _validate_number(cls, number: str) -> None:
        if not cls.number_pattern.match(number):
            raise _guard.error(cls.number_message)

    @classmethod
    def _validate_variant(cls, props: Dict[str, Any]) -> Dict[str, Any]:
        return props

    @property
    def is_valid(self) -> bool:
        """True while the document has not expired."""
        return self.expiry_date > date.today()

    def is_expiring_within(self, days: int) -> bool:
        return self.expiry_date <= date.today() + timedelta(days=days)

    def get_formatted_string(self) -> str:
        raise NotImplementedError


class OldNationalId(IdentityDocumentBase):
    """CMND (Chứng minh nhân dân), the old-format national ID."""

    document_type: ClassVar[IdentityDocumentType] = IdentityDocumentType.CMND
    number_pattern: ClassVar[re.Pattern] = re.compile(r"^(\d{9}|\d{12})$")
    number_message: ClassVar[str] = "CMND number must be 9 or 12 digits"

    type: Literal[IdentityDocumentType.CMND] = IdentityDocumentType.CMND

    def get_formatted_string(self) -> str:
        return f"CMND: {self.number}"


class NewNationalId(IdentityDocumentBase):
    """CCCD (Căn cước công dân), the new-format national ID."""

    document_type: ClassVar[IdentityDocumentType] = IdentityDocumentType.CCCD
    number_pattern: ClassVar[re.Pattern] = re.compile(r"^\d{12}$")
    number_message: ClassVar[str] = "CCCD number must be 12 digits"

    type: Literal[IdentityDocumentType.CCCD] = IdentityDocumentType.CCCD
    has_chip: bool = False

    @classmethod
    def _validate_variant(cls, props: Dict[str, Any]) -> Dict[str, Any]:
        has_chip = props.get("has_chip")
        if has_chip is None:
            props["has_chip"] = False
        elif not isinstance(has_chip, bool):
            raise _guard.error("Has chip must be true or false")
        return props

    def get_formatted_string(self) -> str:
        chip = " (có chip)" if self.has_chip else ""
        return f"CCCD{chip}: {self.number}"


class Passport(IdentityDocumentBase):
    """Passport with its issuing country and optional notes."""

    document_type: ClassVar[IdentityDocumentType] = IdentityDocumentType.PASSPORT
    number_pattern: ClassVar[re.Pattern] = re.compile(r"^[A-Z0-9]{6,9}$")
    number_message: ClassVar[str] = "Passport number must be 6-9 alphanumeric characters"

    type: Literal[IdentityDocumentType.PASSPORT] = IdentityDocumentType.PASSPORT
    issuing_country: str
    notes: Optional[str] = None

    @classmethod
    def _validate_variant(cls, props: Dict[str, Any]) -> Dict[str, Any]:
        issuing_country = props.get("issuing_country")
        if issuing_country is None or str(issuing_country).strip() == "":
            raise _guard.error("Issuing country is required for passport")
        props["issuing_country"] = str(issuing_country).strip()
        props["notes"] = clean_optional(props.get("notes"))
        return props

    @classmethod
    def _validate_number(cls, number: str) -> None:
        if not cls.number_pattern.match(number.upper()):
            raise _guard.error(cls.number_message)

    def get_formatted_string(self) -> str:
        return f"Passport ({self.issuing_country}): {self.number}"


IdentityDocument = Union[OldNationalId, NewNationalId, Passport]

_VARIANTS = {
    IdentityDocumentType.CMND: OldNationalId,
    IdentityDocumentType.CCCD: NewNationalId,
    IdentityDocumentType.PASSPORT: Passport,
}


def _resolve_type(raw: Any) -> Optional[IdentityDocumentType]:
    if isinstance(raw, IdentityDocumentType):
        return raw
    try:
        return IdentityDocumentType(raw)
    except ValueError:
        pass
    if isinstance(raw, str):
        member = IdentityDocumentType.__members__.get(raw.strip().upper())
        if member is not None:
            return member
    return None


def create_identity_document(props: Union[Dict[str, Any], IdentityDocumentBase]) -> IdentityDocument:
    """Build the document variant selected by ``props["type"]``.

    Already-built documents are returned unchanged.

    Raises:
        DomainValidationError: Unknown type, or the variant rejects the props
    """
    if isinstance(props, IdentityDocumentBase):
        return props
    if not isinstance(props, dict):
        raise _guard.error("Identity document is required")
    raw_type = props.get("type")
    document_type = _resolve_type(raw_type)
    if document_type is None:
        raise _guard.error(f"Unsupported identity document type: {raw_type}")
    return _VARIANTS[document_type](**props)
