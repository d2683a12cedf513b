"""
Mirathi - In-Memory Persistence

Reference implementation of ``IFamilyMemberRepository`` and
``IOutboxRepository``. Members are stored as projections, never as live
objects, so two loads of the same member share no mutable state.
"""
from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from core.clock import SYSTEM_CLOCK, Clock
from db.interfaces import (
    ConcurrencyException,
    DuplicateEntityException,
    EntityNotFoundException,
    IFamilyMemberRepository,
    IOutboxRepository,
    ISpecification,
    OutboxMessage,
    OutboxMessageStatus,
    Page,
    PageRequest,
    TrueSpecification,
)
from domain.family_member import FamilyMember
from observability.logging import LogContext, get_logger
from observability.tracing import span_decorator

logger = get_logger("mirathi.db.memory")

ENTITY_TYPE = "FamilyMember"


class InMemoryOutbox(IOutboxRepository):
    """Outbox held in a list; messages keep insertion order."""

    MAX_RETRIES = 5

    def __init__(self) -> None:
        self._messages: List[OutboxMessage] = []

    def append(self, messages: List[OutboxMessage]) -> None:
        self._messages.extend(messages)

    @property
    def messages(self) -> List[OutboxMessage]:
        return list(self._messages)

    def get_pending(self, limit: int = 100) -> List[OutboxMessage]:
        return [m for m in self._messages if m.status is OutboxMessageStatus.PENDING][:limit]

    def _get(self, message_id: UUID) -> OutboxMessage:
        for message in self._messages:
            if message.id == message_id:
                return message
        raise EntityNotFoundException("OutboxMessage", message_id)

    def mark_completed(self, message_id: UUID) -> None:
        message = self._get(message_id)
        message.status = OutboxMessageStatus.COMPLETED
        message.processed_at = datetime.now(timezone.utc)

    def mark_failed(self, message_id: UUID, error: str, retry: bool = True) -> None:
        message = self._get(message_id)
        message.retry_count += 1
        message.error_message = error
        if retry and message.retry_count < self.MAX_RETRIES:
            message.status = OutboxMessageStatus.PENDING
        else:
            message.status = OutboxMessageStatus.FAILED


class InMemoryFamilyMemberRepository(IFamilyMemberRepository):
    """
    Compare-and-swap store for family members.

    ``save`` writes the projection and drains the member's events into
    the outbox under one lock; a rejected save leaves both the store and
    the member's pending events untouched.
    """

    def __init__(self, clock: Optional[Clock] = None, outbox: Optional[InMemoryOutbox] = None) -> None:
        self._clock = clock or SYSTEM_CLOCK
        self._records: Dict[str, Dict[str, Any]] = {}
        self._outbox = outbox or InMemoryOutbox()
        self._lock = threading.Lock()

    @property
    def outbox(self) -> InMemoryOutbox:
        return self._outbox

    @span_decorator("repository.family_member.save", attributes={"db.system": "memory"})
    def save(self, member: FamilyMember, expected_version: Optional[int]) -> None:
        with LogContext(member_id=member.id, family_id=member.family_id), self._lock:
            stored = self._records.get(member.id)
            if stored is None:
                if expected_version not in (None, 0):
                    raise ConcurrencyException(ENTITY_TYPE, member.id, expected_version, None)
            else:
                if expected_version is None:
                    raise DuplicateEntityException(ENTITY_TYPE, member.id)
                actual = stored["version"]
                if actual != expected_version:
                    logger.warning(
                        "Concurrency conflict",
                        expected_version=expected_version,
                        actual_version=actual,
                    )
                    raise ConcurrencyException(ENTITY_TYPE, member.id, expected_version, actual)

            projection = member.to_projection()
            now = self._clock.now()
            messages = [OutboxMessage.from_event(e, created_at=now) for e in member.domain_events]

            self._records[member.id] = projection
            self._outbox.append(messages)
            member.drain_events()

            logger.debug(
                "Member saved",
                version=member.version,
                events=[m.event_type for m in messages],
            )

    def get(self, member_id: str) -> FamilyMember:
        member = self.get_or_none(member_id)
        if member is None:
            raise EntityNotFoundException(ENTITY_TYPE, member_id)
        return member

    def get_or_none(self, member_id: str) -> Optional[FamilyMember]:
        with self._lock:
            record = self._records.get(member_id)
        if record is None:
            return None
        return FamilyMember.from_record(record, clock=self._clock)

    def _all(self) -> List[FamilyMember]:
        with self._lock:
            records = list(self._records.values())
        return [FamilyMember.from_record(r, clock=self._clock) for r in records]

    def find(self, spec: ISpecification[FamilyMember]) -> List[FamilyMember]:
        return [m for m in self._all() if spec.is_satisfied_by(m)]

    def find_page(self, spec: ISpecification[FamilyMember], page_request: PageRequest) -> Page[FamilyMember]:
        return Page.from_list(self.find(spec), page=page_request.page, page_size=page_request.page_size)

    def count(self, spec: Optional[ISpecification[FamilyMember]] = None) -> int:
        return len(self.find(spec or TrueSpecification()))

    def __len__(self) -> int:
        return len(self._records)
