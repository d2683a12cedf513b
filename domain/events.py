"""
Mirathi - Domain Events

Immutable records of significant family-member state changes. Events
are queued on the aggregate and drained by the persistence boundary
after a successful commit.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """
    Base class for domain events.

    ``aggregate_version`` is the version the aggregate reached by the
    mutation that raised the event.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    aggregate_id: Optional[str] = None
    aggregate_version: int = 0

    @property
    def event_type(self) -> str:
        """Return the event type name."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "aggregate_version": self.aggregate_version,
            "data": self._event_data(),
        }

    def _event_data(self) -> Dict[str, Any]:
        """Override in subclasses to provide event-specific data."""
        return {}


# Lifecycle Events
@dataclass(frozen=True)
class FamilyMemberCreated(DomainEvent):
    """Emitted when a member is first recorded."""
    family_id: str = ""
    full_name: str = ""
    is_deceased: bool = False
    is_minor: bool = False
    created_by: Optional[str] = None

    def _event_data(self) -> Dict[str, Any]:
        return {
            "family_id": self.family_id,
            "full_name": self.full_name,
            "is_deceased": self.is_deceased,
            "is_minor": self.is_minor,
            "created_by": self.created_by,
        }


@dataclass(frozen=True)
class FamilyMemberUpdated(DomainEvent):
    """Carries only the fields that changed, as ``{field: {"old": .., "new": ..}}``."""
    changes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    updated_by: Optional[str] = None

    @property
    def changed_fields(self) -> Tuple[str, ...]:
        return tuple(self.changes)

    def _event_data(self) -> Dict[str, Any]:
        return {"changes": self.changes, "updated_by": self.updated_by}


@dataclass(frozen=True)
class FamilyMemberArchived(DomainEvent):
    reason: str = ""
    archived_by: str = ""

    def _event_data(self) -> Dict[str, Any]:
        return {"reason": self.reason, "archived_by": self.archived_by}


@dataclass(frozen=True)
class FamilyMemberUnarchived(DomainEvent):
    unarchived_by: str = ""

    def _event_data(self) -> Dict[str, Any]:
        return {"unarchived_by": self.unarchived_by}


# Life Status Events
@dataclass(frozen=True)
class FamilyMemberDeceased(DomainEvent):
    """Emitted on death; succession (LSA Part V) may now open."""
    date_of_death: str = ""
    place_of_death: Optional[str] = None
    cause_of_death: Optional[str] = None
    death_certificate_number: Optional[str] = None
    age_at_death: Optional[int] = None

    def _event_data(self) -> Dict[str, Any]:
        return {
            "date_of_death": self.date_of_death,
            "place_of_death": self.place_of_death,
            "cause_of_death": self.cause_of_death,
            "death_certificate_number": self.death_certificate_number,
            "age_at_death": self.age_at_death,
        }


@dataclass(frozen=True)
class AgeRecalculated(DomainEvent):
    previous_age: Optional[int] = None
    new_age: Optional[int] = None
    reason: str = ""

    def _event_data(self) -> Dict[str, Any]:
        return {"previous_age": self.previous_age, "new_age": self.new_age, "reason": self.reason}


@dataclass(frozen=True)
class MissingStatusChanged(DomainEvent):
    """``is_missing`` is True when reported missing and False when found."""
    is_missing: bool = False
    missing_since: Optional[str] = None
    last_seen_location: Optional[str] = None
    reported_by: Optional[str] = None

    def _event_data(self) -> Dict[str, Any]:
        return {
            "is_missing": self.is_missing,
            "missing_since": self.missing_since,
            "last_seen_location": self.last_seen_location,
            "reported_by": self.reported_by,
        }


# Identity Events
@dataclass(frozen=True)
class IdentityVerified(DomainEvent):
    document_type: str = ""
    method: str = ""
    verified_by: str = ""
    verified_at: str = ""

    def _event_data(self) -> Dict[str, Any]:
        return {
            "document_type": self.document_type,
            "method": self.method,
            "verified_by": self.verified_by,
            "verified_at": self.verified_at,
        }


# Statutory Events
@dataclass(frozen=True)
class DependencyAssessed(DomainEvent):
    """Outcome of the S.29 dependant assessment."""
    is_potential_dependant: bool = False
    dependency_level: str = "NONE"
    basis: Tuple[str, ...] = ()
    legal_citation: str = ""

    def _event_data(self) -> Dict[str, Any]:
        return {
            "is_potential_dependant": self.is_potential_dependant,
            "dependency_level": self.dependency_level,
            "basis": list(self.basis),
            "legal_citation": self.legal_citation,
        }


@dataclass(frozen=True)
class DisabilityStatusChanged(DomainEvent):
    had_disability: bool = False
    has_disability: bool = False
    highest_severity: Optional[str] = None

    def _event_data(self) -> Dict[str, Any]:
        return {
            "had_disability": self.had_disability,
            "has_disability": self.has_disability,
            "highest_severity": self.highest_severity,
        }


@dataclass(frozen=True)
class PolygamousHouseAssigned(DomainEvent):
    house_id: str = ""
    house_order: int = 0
    previous_house_id: Optional[str] = None

    def _event_data(self) -> Dict[str, Any]:
        return {
            "house_id": self.house_id,
            "house_order": self.house_order,
            "previous_house_id": self.previous_house_id,
        }


@dataclass(frozen=True)
class StatutoryStatusChanged(DomainEvent):
    """A change that alters how succession law treats the member."""
    status: str = ""
    legal_citation: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def _event_data(self) -> Dict[str, Any]:
        return {"status": self.status, "legal_citation": self.legal_citation, "details": self.details}
