"""Faculty entity."""
import re
from typing import Any, ClassVar, Dict

from pydantic import model_validator

from academic_records.core.logging import get_logger
from academic_records.domain.base import DomainEntity
from academic_records.domain.validation import Guard
from academic_records.utils.dates import utcnow

logger = get_logger(__name__)

_guard = Guard("Faculty")

# Letters (Unicode included), digits, underscore, whitespace, hyphen, dot
FACULTY_ID_PATTERN = re.compile(r"^[\w\s\-.]{2,100}$")


class Faculty(DomainEntity):
    """Academic faculty identified by a short code and a display name."""

    entity_name: ClassVar[str] = "Faculty"

    faculty_id: str
    name: str

    @model_validator(mode="before")
    @classmethod
    def _validate_props(cls, data: Any) -> Any:
        if isinstance(data, Faculty):
            return data
        props = dict(cls._canonical(data or {}))
        _guard.is_required(props.get("faculty_id"), "Faculty ID")
        _guard.is_required(props.get("name"), "Faculty name")

        props["faculty_id"] = str(props["faculty_id"]).strip()
        props["name"] = str(props["name"]).strip()
        _guard.min_length(props["faculty_id"], 2, "Faculty ID")
        _guard.max_length(props["faculty_id"], 100, "Faculty ID")
        _guard.min_length(props["name"], 2, "Faculty name")
        _guard.max_length(props["name"], 200, "Faculty name")
        return props

    @model_validator(mode="after")
    def _validate_business_rules(self) -> "Faculty":
        if not FACULTY_ID_PATTERN.match(self.faculty_id):
            raise _guard.error("Faculty ID must be 2-100 characters and contain valid characters")
        if not self.name:
            raise _guard.error("Faculty name cannot be empty")
        return self

    def rename(self, new_name: str) -> "Faculty":
        _guard.is_required(new_name, "New name")
        new_name = new_name.strip()
        _guard.min_length(new_name, 2, "New name")
        _guard.max_length(new_name, 200, "New name")
        return self.update_with(name=new_name)

    def update_with(self, **changes: Any) -> "Faculty":
        """Only the name may change; the faculty code is fixed."""
        changes = self._canonical(changes)
        unknown = set(changes) - {"name"}
        if unknown:
            raise _guard.error(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        return Faculty(
            faculty_id=self.faculty_id,
            name=changes.get("name", self.name),
            **self._carry_over(),
        )

    def can_accept_students(self) -> bool:
        return bool(self.name) and bool(self.faculty_id)

    @classmethod
    def create(cls, faculty_id: str, name: str) -> "Faculty":
        now = utcnow()
        return cls(faculty_id=faculty_id, name=name, created_at=now, updated_at=now)

    @classmethod
    def from_legacy_data(cls, data: Dict[str, Any]) -> "Faculty":
        """Load a stored faculty that may predate the current format rules.

        Only "name must be non-empty" is enforced. Use this for records read
        back from storage, never for new user input.
        """
        props = cls._canonical(data)
        name = str(props.get("name") or "").strip()
        if not name:
            raise _guard.error("Faculty name cannot be empty")

        faculty = cls.model_construct(
            id=cls._legacy_id(props),
            faculty_id=str(props.get("faculty_id") or "").strip(),
            name=name,
            created_at=cls._legacy_timestamp(props.get("created_at")),
            updated_at=cls._legacy_timestamp(props.get("updated_at")),
        )
        logger.debug(
            "Faculty %s reconstructed from legacy data",
            faculty.faculty_id,
            extra={"entity": cls.entity_name, "entity_id": faculty.id},
        )
        return faculty
