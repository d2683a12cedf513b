"""
Mirathi - Base Entity and Aggregate Root

Aggregates are consistency boundaries: every mutation checks its guards
first, then changes state, bumps the version by exactly one and queues
the events it implies. A failed guard leaves the aggregate untouched.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.clock import SYSTEM_CLOCK, Clock
from core.errors import DomainInvariantViolation
from domain.events import DomainEvent
from observability.logging import DomainLogger


class Entity(ABC):
    """
    Base class for domain entities.

    Entities have identity that persists over time, distinguishing them
    from value objects which are defined solely by their attributes.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier for this entity."""

    @property
    def entity_type(self) -> str:
        """Return the type name of this entity."""
        return self.__class__.__name__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        return type(self) is type(other) and self.id == other.id

    def __hash__(self) -> int:
        return hash((self.entity_type, self.id))

    def __repr__(self) -> str:
        return f"{self.entity_type}(id={self.id!r})"


class AggregateRoot(Entity, ABC):
    """
    Base class for aggregate roots.

    Tracks a monotonic version for optimistic concurrency and an
    append-only queue of pending domain events.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or SYSTEM_CLOCK
        self._domain_events: List[DomainEvent] = []
        self._version: int = 0
        self._last_event_at: Optional[datetime] = None
        self._invariant_violations: List[str] = []
        self._log = DomainLogger(self.aggregate_type.lower())

    # =========================================================================
    # EVENTS AND VERSIONING
    # =========================================================================

    @property
    def version(self) -> int:
        """Current version for optimistic concurrency."""
        return self._version

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def domain_events(self) -> List[DomainEvent]:
        """Pending domain events (copy)."""
        return list(self._domain_events)

    @property
    def has_pending_events(self) -> bool:
        return len(self._domain_events) > 0

    def add_domain_event(self, event: DomainEvent) -> None:
        """Queue a domain event to be dispatched on commit."""
        self._domain_events.append(event)
        self._last_event_at = event.occurred_at

    def clear_domain_events(self) -> List[DomainEvent]:
        """Clear and return all pending domain events."""
        events = self._domain_events
        self._domain_events = []
        return events

    def drain_events(self) -> List[DomainEvent]:
        """Hand pending events to the persistence boundary exactly once."""
        return self.clear_domain_events()

    def increment_version(self) -> None:
        self._version += 1

    def _commit(self, operation: str, *events: DomainEvent) -> None:
        """
        Finish a successful mutation: version +1, then queue ``events``
        stamped with this aggregate's id, the new version and the clock.
        """
        self.increment_version()
        now = self._clock.now()
        for event in events:
            self.add_domain_event(
                replace(
                    event,
                    aggregate_id=self.id,
                    aggregate_version=self._version,
                    occurred_at=now,
                )
            )
        self._log.mutated(self.id, operation, self._version, [e.event_type for e in events])

    def _guard(self, condition: bool, operation: str, invariant: str, message: str) -> None:
        """Raise ``DomainInvariantViolation`` unless ``condition`` holds."""
        if condition:
            return
        self._log.rejected(self.id, operation, message)
        raise DomainInvariantViolation(
            message,
            aggregate_id=self.id,
            operation=operation,
            invariant=invariant,
        )

    # =========================================================================
    # SELF-MONITORING
    # =========================================================================

    @property
    def is_healthy(self) -> bool:
        self._validate_invariants()
        return len(self._invariant_violations) == 0

    @property
    def invariant_violations(self) -> List[str]:
        self._validate_invariants()
        return list(self._invariant_violations)

    def _validate_invariants(self) -> None:
        """Override in subclasses to add domain-specific invariant checks."""
        self._invariant_violations = []

    def _add_invariant_violation(self, violation: str) -> None:
        if violation not in self._invariant_violations:
            self._invariant_violations.append(violation)

    def introspect(self) -> Dict[str, Any]:
        """Diagnostic view of the aggregate (not a serialization format)."""
        self._validate_invariants()
        return {
            "entity_type": self.entity_type,
            "id": self.id,
            "version": self._version,
            "is_healthy": not self._invariant_violations,
            "invariant_violations": list(self._invariant_violations),
            "pending_events": len(self._domain_events),
            "last_event_at": self._last_event_at.isoformat() if self._last_event_at else None,
        }

    @property
    def aggregate_type(self) -> str:
        return self.__class__.__name__

    @property
    def stream_name(self) -> str:
        """Event stream name: ``{type}-{id}``."""
        return f"{self.aggregate_type.lower()}-{self.id}"
