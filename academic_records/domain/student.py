"""Student aggregate root.

A ``Student`` owns one ``Address`` and one identity document and enforces
the academic business rules across its fields:

- age between 16 and 100
- enrollment date not in the future
- graduation at least 3.5 years after enrollment, only for GRADUATED
- GRADUATED requires a graduation date and GPA >= 2.0
- GPA within 0.0-4.0

Every change goes through ``update_with``, which builds and revalidates a
new instance.
"""
import re
from datetime import date
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from pydantic import field_validator, model_validator

from academic_records.core.logging import get_logger
from academic_records.domain.address import Address
from academic_records.domain.base import DomainEntity
from academic_records.domain.identity_document import IdentityDocument, create_identity_document
from academic_records.domain.validation import Guard
from academic_records.utils.dates import add_months, add_years, age_on, fractional_years_between, utcnow
from academic_records.utils.text import clean_optional, strip_whitespace

logger = get_logger(__name__)

_guard = Guard("Student")

MIN_AGE = 16
MAX_AGE = 100
MIN_STUDY_WHOLE_YEARS = 3
MIN_STUDY_EXTRA_MONTHS = 6
MIN_STUDY_YEARS = 3.5
MIN_GRADUATION_GPA = 2.0
MAX_GPA = 4.0
PROGRAM_LENGTH_YEARS = 4

STUDENT_ID_PATTERN = re.compile(r"^\d{8}$")
PHONE_PATTERN = re.compile(r"^(\+84|84|0)(3|5|7|8|9)[0-9]{8}$")

# (field, label) checked in this order before anything else
_REQUIRED_FIELDS = (
    ("student_id", "Student ID"),
    ("first_name", "First name"),
    ("last_name", "Last name"),
    ("email", "Email"),
    ("phone_number", "Phone number"),
    ("faculty_id", "Faculty ID"),
    ("program_id", "Program ID"),
)


class _TaggedEnum(str, Enum):
    """Stored values are Vietnamese; member names are accepted as well."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_").replace(" ", "_")
            return cls.__members__.get(key)
        return None


class Gender(_TaggedEnum):
    MALE = "Nam"
    FEMALE = "Nữ"
    OTHER = "Khác"


class StudentStatus(_TaggedEnum):
    ACTIVE = "Đang học"
    GRADUATED = "Đã tốt nghiệp"
    DROPPED_OUT = "Đã nghỉ học"
    SUSPENDED = "Đình chỉ"
    ON_LEAVE = "Tạm nghỉ"


def earliest_graduation_date(enrollment_date: date) -> date:
    """First date a graduation may be recorded for ``enrollment_date``.

    Years are added first, then months, and a day missing from the target
    month rolls into the next one: an Aug 31 enrollment cannot graduate
    before Mar 3 (Mar 2 in a leap year) three and a half years later.
    """
    shifted = add_years(enrollment_date, MIN_STUDY_WHOLE_YEARS, overflow=True)
    return add_months(shifted, MIN_STUDY_EXTRA_MONTHS, overflow=True)


def _as_gpa(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise _guard.error("GPA must be a number")
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise _guard.error("GPA must be a number") from None


def _enum_value(enum_cls, raw: Any) -> Any:
    """Stored value for ``raw`` if it names a member, else ``raw`` itself."""
    try:
        return enum_cls(raw).value
    except (ValueError, TypeError):
        return raw


class Student(DomainEntity):
    """Student aggregate root.

    Attributes:
        student_id: 8-digit university student number
        first_name: Given name
        last_name: Family (and middle) name
        date_of_birth: Date of birth
        gender: Gender
        email: Contact email, stored lowercase
        phone_number: Vietnamese mobile number
        identity_document: CMND, CCCD or passport
        address: Permanent address
        faculty_id: Owning faculty reference
        program_id: Enrollment program reference
        class_id: Optional class reference
        status: Lifecycle status
        enrollment_date: Date of enrollment
        graduation_date: Present only for graduated students
        gpa: Cumulative GPA on the 4.0 scale
    """

    entity_name: ClassVar[str] = "Student"

    student_id: str
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    email: str
    phone_number: str
    identity_document: IdentityDocument
    address: Address
    faculty_id: str
    program_id: str
    class_id: Optional[str] = None
    status: StudentStatus
    enrollment_date: date
    graduation_date: Optional[date] = None
    gpa: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _validate_props(cls, data: Any) -> Any:
        if isinstance(data, Student):
            return data
        props = dict(cls._canonical(data or {}))

        for field, label in _REQUIRED_FIELDS:
            _guard.is_required(props.get(field), label)

        props["date_of_birth"] = _guard.is_valid_past_date(props.get("date_of_birth"), "Date of birth")
        props["enrollment_date"] = _guard.as_date(props.get("enrollment_date"), "Enrollment date")
        if props.get("graduation_date") is not None:
            props["graduation_date"] = _guard.as_date(props["graduation_date"], "Graduation date")

        _guard.is_valid_email(props["email"])

        props["gender"] = _enum_value(Gender, props.get("gender"))
        props["status"] = _enum_value(StudentStatus, props.get("status"))
        _guard.is_in_allowed_values(props["gender"], Gender, "Gender")
        _guard.is_in_allowed_values(props["status"], StudentStatus, "Status")

        if props.get("identity_document") is None:
            raise _guard.error("Identity document is required")
        if not isinstance(props.get("address"), (Address, dict)):
            raise _guard.error("Address is required")
        props["gpa"] = _as_gpa(props.get("gpa"))

        for field, _ in _REQUIRED_FIELDS:
            props[field] = str(props[field]).strip()
        props["email"] = props["email"].lower()
        props["class_id"] = clean_optional(props.get("class_id"))
        return props

    @field_validator("identity_document", mode="before")
    @classmethod
    def _dispatch_identity_document(cls, value: Any) -> Any:
        return create_identity_document(value)

    @model_validator(mode="after")
    def _validate_business_rules(self) -> "Student":
        self._validate_age()
        self._validate_student_id()
        self._validate_phone_number()
        self._validate_enrollment_logic()
        self._validate_gpa()
        self._validate_graduation()
        return self

    def _validate_age(self) -> None:
        age = self.age
        if age < MIN_AGE:
            raise _guard.error(f"Student must be at least {MIN_AGE} years old")
        if age > MAX_AGE:
            raise _guard.error(f"Student age cannot exceed {MAX_AGE} years")

    def _validate_student_id(self) -> None:
        if not STUDENT_ID_PATTERN.match(self.student_id):
            raise _guard.error("Student ID must be 8 digits")

    def _validate_phone_number(self) -> None:
        if not PHONE_PATTERN.match(strip_whitespace(self.phone_number)):
            raise _guard.error("Phone number format is invalid")

    def _validate_enrollment_logic(self) -> None:
        if self.enrollment_date > date.today():
            raise _guard.error("Enrollment date cannot be in the future")
        if self.graduation_date is None:
            return
        if self.graduation_date <= self.enrollment_date:
            raise _guard.error("Graduation date must be after enrollment date")
        if self.graduation_date < earliest_graduation_date(self.enrollment_date):
            raise _guard.error(
                "Graduation date is too early (minimum 3.5 years study period required)"
            )

    def _validate_gpa(self) -> None:
        if self.gpa is not None and not 0 <= self.gpa <= MAX_GPA:
            raise _guard.error(f"GPA must be between 0 and {MAX_GPA}")

    def _validate_graduation(self) -> None:
        if self.status == StudentStatus.GRADUATED:
            if self.graduation_date is None:
                raise _guard.error("Graduation date is required for graduated students")
            if self.gpa is None or self.gpa < MIN_GRADUATION_GPA:
                raise _guard.error(
                    f"GPA of at least {MIN_GRADUATION_GPA} is required for graduation"
                )
        elif self.graduation_date is not None:
            raise _guard.error("Students with graduation date must have GRADUATED status")

    # Computed properties

    @property
    def full_name(self) -> str:
        return f"{self.last_name} {self.first_name}"

    @property
    def age(self) -> int:
        return age_on(self.date_of_birth, date.today())

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE

    @property
    def is_graduated(self) -> bool:
        return self.status == StudentStatus.GRADUATED

    @property
    def can_enroll(self) -> bool:
        return self.status in (StudentStatus.ACTIVE, StudentStatus.ON_LEAVE)

    @property
    def academic_standing(self) -> str:
        """GPA band: Excellent, Good, Fair, Poor or Probation."""
        if self.gpa is None:
            return "Not Available"
        if self.gpa >= 3.6:
            return "Excellent"
        if self.gpa >= 3.2:
            return "Good"
        if self.gpa >= 2.5:
            return "Fair"
        if self.gpa >= 2.0:
            return "Poor"
        return "Probation"

    @property
    def years_enrolled(self) -> float:
        """Years from enrollment to graduation (or today), month precision."""
        end = self.graduation_date or date.today()
        return fractional_years_between(self.enrollment_date, end)

    # Business methods

    def can_register_for_courses(self) -> bool:
        return self.can_enroll and self.identity_document.is_valid

    def is_eligible_for_graduation(self) -> bool:
        return (
            self.is_active
            and self.gpa is not None
            and self.gpa >= MIN_GRADUATION_GPA
            and self.years_enrolled >= MIN_STUDY_YEARS
        )

    def get_expected_graduation_year(self) -> int:
        return self.enrollment_date.year + PROGRAM_LENGTH_YEARS

    def update_with(self, **changes: Any) -> "Student":
        """Return a new student with ``changes`` applied and revalidated.

        Only the keyword arguments given are replaced; passing ``None``
        clears an optional field. ``id`` and ``created_at`` are kept and
        ``updated_at`` is refreshed.

        Raises:
            DomainValidationError: The merged state breaks an invariant
        """
        changes = self._canonical(changes)
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise _guard.error(f"Unknown field(s): {', '.join(sorted(unknown))}")

        props: Dict[str, Any] = self.model_dump()
        props["identity_document"] = self.identity_document
        props["address"] = self.address
        props.update(changes)
        props.update(self._carry_over())

        updated = Student(**props)
        logger.debug(
            "Student %s updated: %s",
            self.student_id,
            ", ".join(sorted(changes)),
            extra={"entity": self.entity_name, "entity_id": self.id},
        )
        return updated

    @classmethod
    def create(cls, **props: Any) -> "Student":
        """Validate and build a new (not yet persisted) student."""
        now = utcnow()
        props = cls._canonical(props)
        props.pop("id", None)
        props.update(created_at=now, updated_at=now)
        return cls(**props)
