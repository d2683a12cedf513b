"""
Mirathi - Persistence Interfaces

- Specification Pattern for composable member queries
- Repository interface with optimistic concurrency (compare-and-swap on version)
- Outbox messages for reliable event publishing
- Pagination with total count tracking

The domain core is synchronous, so these interfaces are too.

Usage:
    from db.interfaces import IFamilyMemberRepository, PageRequest
    from domain.specifications import BelongsToFamilySpec, IsMinorSpec

    minors = repo.find(BelongsToFamilySpec("fam-1") & IsMinorSpec())
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from domain.events import DomainEvent
    from domain.family_member import FamilyMember


T = TypeVar("T")
U = TypeVar("U")
PageItemT = TypeVar("PageItemT")


# =============================================================================
# PAGINATION
# =============================================================================


@dataclass(frozen=True, slots=True)
class Page(Generic[PageItemT]):
    """Immutable pagination result wrapper."""
    items: Tuple[PageItemT, ...]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    def map(self, func: Callable[[PageItemT], U]) -> "Page[U]":
        """Transform items in the page to a different type."""
        return Page(
            items=tuple(func(item) for item in self.items),
            total=self.total,
            page=self.page,
            page_size=self.page_size,
        )

    @classmethod
    def from_list(
        cls, all_items: Sequence[PageItemT], page: int = 1, page_size: int = 10
    ) -> "Page[PageItemT]":
        """Create a page by slicing from a full list (in-memory pagination)."""
        offset = (page - 1) * page_size
        return cls(
            items=tuple(all_items[offset:offset + page_size]),
            total=len(all_items),
            page=page,
            page_size=page_size,
        )


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Request parameters for pagination."""
    page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"Page must be >= 1: {self.page}")
        if self.page_size < 1 or self.page_size > 1000:
            raise ValueError(f"Page size must be 1-1000: {self.page_size}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


# =============================================================================
# SPECIFICATION PATTERN
# =============================================================================


class ISpecification(ABC, Generic[T]):
    """
    Specification pattern for composable, type-safe queries.

    Specifications combine with ``&``, ``|`` and ``~`` (or ``and_``,
    ``or_``, ``not_``). ``to_query_params`` describes the predicate for
    stores that can push filtering down.
    """

    @abstractmethod
    def is_satisfied_by(self, entity: T) -> bool:
        """Check if an entity satisfies this specification."""

    @abstractmethod
    def to_query_params(self) -> Dict[str, Any]:
        """Convert specification to query parameters."""

    def and_(self, other: "ISpecification[T]") -> "ISpecification[T]":
        return AndSpecification(self, other)

    def or_(self, other: "ISpecification[T]") -> "ISpecification[T]":
        return OrSpecification(self, other)

    def not_(self) -> "ISpecification[T]":
        return NotSpecification(self)

    def __and__(self, other: "ISpecification[T]") -> "ISpecification[T]":
        return self.and_(other)

    def __or__(self, other: "ISpecification[T]") -> "ISpecification[T]":
        return self.or_(other)

    def __invert__(self) -> "ISpecification[T]":
        return self.not_()


class AndSpecification(ISpecification[T]):
    """Specification that combines two specs with AND logic."""

    def __init__(self, left: ISpecification[T], right: ISpecification[T]) -> None:
        self._left = left
        self._right = right

    def is_satisfied_by(self, entity: T) -> bool:
        return self._left.is_satisfied_by(entity) and self._right.is_satisfied_by(entity)

    def to_query_params(self) -> Dict[str, Any]:
        return {"$and": [self._left.to_query_params(), self._right.to_query_params()]}


class OrSpecification(ISpecification[T]):
    """Specification that combines two specs with OR logic."""

    def __init__(self, left: ISpecification[T], right: ISpecification[T]) -> None:
        self._left = left
        self._right = right

    def is_satisfied_by(self, entity: T) -> bool:
        return self._left.is_satisfied_by(entity) or self._right.is_satisfied_by(entity)

    def to_query_params(self) -> Dict[str, Any]:
        return {"$or": [self._left.to_query_params(), self._right.to_query_params()]}


class NotSpecification(ISpecification[T]):
    """Specification that negates another spec."""

    def __init__(self, spec: ISpecification[T]) -> None:
        self._spec = spec

    def is_satisfied_by(self, entity: T) -> bool:
        return not self._spec.is_satisfied_by(entity)

    def to_query_params(self) -> Dict[str, Any]:
        return {"$not": self._spec.to_query_params()}


class TrueSpecification(ISpecification[T]):
    """Specification that always matches (useful as base for building)."""

    def is_satisfied_by(self, entity: T) -> bool:
        del entity  # Unused but required by interface
        return True

    def to_query_params(self) -> Dict[str, Any]:
        return {}


# =============================================================================
# OUTBOX PATTERN FOR RELIABLE EVENT PUBLISHING
# =============================================================================


class OutboxMessageStatus(Enum):
    """Status of an outbox message."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class OutboxMessage:
    """
    Outbox message for reliable event publishing.

    Written in the same step as the aggregate state, so an event is
    published if and only if its mutation was stored.
    """
    id: UUID
    event_type: str
    aggregate_id: Optional[str]
    aggregate_version: int
    payload: Dict[str, Any]
    status: OutboxMessageStatus
    created_at: datetime
    processed_at: Optional[datetime] = None
    retry_count: int = 0
    error_message: Optional[str] = None

    @classmethod
    def from_event(cls, event: "DomainEvent", created_at: Optional[datetime] = None) -> "OutboxMessage":
        """Create outbox message from domain event."""
        return cls(
            id=uuid4(),
            event_type=event.event_type,
            aggregate_id=event.aggregate_id,
            aggregate_version=event.aggregate_version,
            payload=event.to_dict(),
            status=OutboxMessageStatus.PENDING,
            created_at=created_at or datetime.now(timezone.utc),
        )


class IOutboxRepository(ABC):
    """Repository for outbox pattern message storage."""

    @abstractmethod
    def get_pending(self, limit: int = 100) -> List[OutboxMessage]:
        """Get pending messages for processing."""

    @abstractmethod
    def mark_completed(self, message_id: UUID) -> None:
        """Mark message as successfully processed."""

    @abstractmethod
    def mark_failed(self, message_id: UUID, error: str, retry: bool = True) -> None:
        """Mark message as failed, optionally allowing retry."""


# =============================================================================
# REPOSITORY
# =============================================================================


class IFamilyMemberRepository(ABC):
    """
    Family member persistence with optimistic concurrency.

    ``save`` is a compare-and-swap: the write happens only when the stored
    version equals ``expected_version`` (``None`` for a new member). On
    success the aggregate's pending events are drained into the outbox in
    the same step; on failure they stay on the aggregate.
    """

    @abstractmethod
    def save(self, member: "FamilyMember", expected_version: Optional[int]) -> None:
        """
        Store ``member``.

        Raises:
            ConcurrencyException: if the stored version differs
            DuplicateEntityException: if a new member's id is taken
        """

    @abstractmethod
    def get(self, member_id: str) -> "FamilyMember":
        """
        Load a member by id.

        Raises:
            EntityNotFoundException: if no member has this id
        """

    @abstractmethod
    def get_or_none(self, member_id: str) -> Optional["FamilyMember"]:
        """Load a member by id, or ``None``."""

    @abstractmethod
    def find(self, spec: ISpecification["FamilyMember"]) -> List["FamilyMember"]:
        """All members matching ``spec``."""

    @abstractmethod
    def find_page(self, spec: ISpecification["FamilyMember"], page_request: PageRequest) -> Page["FamilyMember"]:
        """Members matching ``spec``, one page at a time."""

    @abstractmethod
    def count(self, spec: Optional[ISpecification["FamilyMember"]] = None) -> int:
        """Count members matching ``spec`` (all when ``None``)."""


# =============================================================================
# CONCURRENCY CONTROL
# =============================================================================


class ConcurrencyException(Exception):
    """Raised when optimistic concurrency check fails."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        expected_version: Optional[int],
        actual_version: Optional[int],
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Concurrency conflict: {entity_type} {entity_id} "
            f"expected version {expected_version}, actual {actual_version}"
        )


class EntityNotFoundException(Exception):
    """Raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class DuplicateEntityException(Exception):
    """Raised when trying to add an entity that already exists."""

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} already exists: {entity_id}")


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Pagination
    "Page",
    "PageRequest",
    # Specification Pattern
    "ISpecification",
    "AndSpecification",
    "OrSpecification",
    "NotSpecification",
    "TrueSpecification",
    # Outbox Pattern
    "OutboxMessage",
    "OutboxMessageStatus",
    "IOutboxRepository",
    # Repository
    "IFamilyMemberRepository",
    # Exceptions
    "ConcurrencyException",
    "EntityNotFoundException",
    "DuplicateEntityException",
]
