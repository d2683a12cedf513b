"""
Mirathi - Value Object Base

Value objects are immutable and self-validating: construction runs
``validate`` and no instance escapes when it raises. Equality is
structural and scoped to the concrete class (the dataclass ``__eq__``
compares ``__class__`` before fields).

Data-quality anomalies that should not block construction are recorded
as ``Advisory`` entries. The boundary between advisory and hard failure
is configuration (``DataQualityConfig.escalate``), not code.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from config import get_config
from core.errors import ValueObjectValidationError


class DataQualityIssue(str, Enum):
    """Named anomalies a value object may report instead of failing."""
    LOW_POSITIONAL_ACCURACY = "LOW_POSITIONAL_ACCURACY"
    NON_PREFERRED_EMAIL_DOMAIN = "NON_PREFERRED_EMAIL_DOMAIN"
    LATE_BIRTH_REGISTRATION = "LATE_BIRTH_REGISTRATION"
    LATE_DEATH_REGISTRATION = "LATE_DEATH_REGISTRATION"
    OUTSIDE_NATIONAL_BOUNDS_LOCATION_HINT = "OUTSIDE_NATIONAL_BOUNDS_LOCATION_HINT"
    MISSING_DEATH_CERTIFICATE = "MISSING_DEATH_CERTIFICATE"
    UNKNOWN_DATE_OF_DEATH = "UNKNOWN_DATE_OF_DEATH"


@dataclass(frozen=True, slots=True)
class Advisory:
    """A recorded, non-blocking data-quality observation."""
    code: DataQualityIssue
    field_name: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code.value, "field": self.field_name, "message": self.message}


@dataclass(frozen=True, slots=True)
class ValueObject:
    """
    Base class for all domain value objects.

    Subclasses are frozen dataclasses and override ``validate`` (and
    ``normalize`` when input needs canonicalising). Both run inside
    ``__post_init__`` so every construction path, including
    ``dataclasses.replace``, re-validates.
    """
    _advisories: Tuple[Advisory, ...] = field(
        default=(), init=False, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        self.normalize()
        self.validate()

    def normalize(self) -> None:
        """Canonicalise raw input before validation."""

    def validate(self) -> None:
        """Raise ``ValueObjectValidationError`` when the value is invalid."""

    # -------------------------------------------------------------------------
    # Helpers for subclasses
    # -------------------------------------------------------------------------

    def _set(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, value)

    def _invalid(self, message: str, field_name: str, **details: Any) -> ValueObjectValidationError:
        return ValueObjectValidationError(
            message,
            field_name=field_name,
            value_object=type(self).__name__,
            details=details,
        )

    def _advise(self, code: DataQualityIssue, field_name: str, message: str, **details: Any) -> None:
        """Record an advisory, or raise when configuration escalates ``code``."""
        if get_config().data_quality.is_escalated(code.value):
            raise ValueObjectValidationError(
                message,
                field_name=field_name,
                value_object=type(self).__name__,
                details={"anomaly": code.value, **details},
            )
        self._set("_advisories", self._advisories + (Advisory(code, field_name, message),))

    # -------------------------------------------------------------------------
    # Public surface
    # -------------------------------------------------------------------------

    @property
    def advisories(self) -> Tuple[Advisory, ...]:
        return self._advisories

    @property
    def has_advisories(self) -> bool:
        return bool(self._advisories)

    def equals(self, other: object) -> bool:
        """Deep structural equality; instances of different classes never match."""
        return self == other

    def to_projection(self) -> Dict[str, Any]:
        """Plain, fully expanded representation (derived fields included)."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            if f.name.startswith("_") or f.metadata.get("projected") is False:
                continue
            data[f.name] = project_value(getattr(self, f.name))
        data.update(self._derived_projection())
        if self._advisories:
            data["advisories"] = [a.to_dict() for a in self._advisories]
        return data

    def _derived_projection(self) -> Dict[str, Any]:
        return {}


def project_value(value: Any) -> Any:
    """Convert a domain value into plain JSON-friendly data."""
    if isinstance(value, ValueObject):
        return value.to_projection()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: project_value(v) for k, v in value.items()}
    if isinstance(value, (tuple, list, frozenset, set)):
        return [project_value(v) for v in value]
    return value


def coerce_enum(vo: ValueObject, name: str, enum_cls: type) -> None:
    """Coerce a raw string field to ``enum_cls``; unknown values are typed failures."""
    value = getattr(vo, name)
    if value is None or isinstance(value, enum_cls):
        return
    try:
        vo._set(name, enum_cls(str(value).strip().upper()))
    except ValueError as e:
        raise vo._invalid(f"Unknown {name}: {value!r}", name, value=value) from e
