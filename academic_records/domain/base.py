"""Base model shared by the domain entities.

Entities are frozen pydantic models: every "update" builds a new
instance. Python attributes are snake_case while the plain-object form
handed to persistence adapters uses camelCase keys; constructors accept
either spelling.
"""
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from academic_records.domain.validation import DomainValidationError
from academic_records.utils.dates import utcnow


_TIMESTAMP_ADAPTER = TypeAdapter(datetime)


def _as_domain_error(entity_name: str, exc: ValidationError) -> DomainValidationError:
    """Collapse pydantic's own type errors into the domain error kind."""
    first = exc.errors(include_url=False)[0]
    field = ".".join(str(part) for part in first["loc"])
    reason = f"{field}: {first['msg']}" if field else first["msg"]
    return DomainValidationError(entity_name, reason)


class DomainModel(BaseModel):
    """Immutable model with camelCase plain-object serialization.

    Construction only ever fails with ``DomainValidationError``; inputs
    of the wrong type that reach pydantic's field checks are reported
    under ``entity_name`` like any other rule.
    """

    entity_name: ClassVar[str] = "Entity"

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise _as_domain_error(type(self).entity_name, exc) from None

    @classmethod
    def _canonical(cls, data: Any) -> Any:
        """Re-key a props mapping from camelCase aliases to field names."""
        if not isinstance(data, dict):
            return data
        aliases = {to_camel(name): name for name in cls.model_fields}
        return {aliases.get(key, key): value for key, value in data.items()}

    def to_plain_object(self) -> Dict[str, Any]:
        """JSON-safe dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_plain_object(cls, data: Dict[str, Any]):
        """Rebuild a model from ``to_plain_object`` output (fully validated)."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise _as_domain_error(cls.entity_name, exc) from None


class DomainEntity(DomainModel):
    """Entity with an optional persistence id and audit timestamps.

    Attributes:
        id: Opaque identifier assigned by the persistence layer
        created_at: Creation timestamp (defaults to now)
        updated_at: Last update timestamp (defaults to now)
    """

    id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_persisted(self) -> bool:
        return bool(self.id)

    def same_identity_as(self, other: "DomainEntity") -> bool:
        """Entity equality: both persisted and sharing the same id."""
        if not isinstance(other, DomainEntity) or not self.id or not other.id:
            return False
        return self.id == other.id

    def _carry_over(self) -> Dict[str, Any]:
        """Identity fields kept by every copy-with update."""
        return {"id": self.id, "created_at": self.created_at, "updated_at": utcnow()}

    @staticmethod
    def _legacy_id(data: Dict[str, Any]) -> Optional[str]:
        """Id from a stored record, which may use ``_id`` (document stores)."""
        raw = data.get("id")
        if raw is None:
            raw = data.get("_id")
        return str(raw) if raw is not None else None

    @staticmethod
    def _legacy_timestamp(value: Any) -> datetime:
        """Parse a stored timestamp; missing values become now."""
        if value is None or value == "":
            return utcnow()
        return _TIMESTAMP_ADAPTER.validate_python(value)
