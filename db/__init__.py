"""
Mirathi - Persistence Layer

Repository interfaces with optimistic concurrency, the transactional
outbox, and an in-memory reference store.

Usage:
    from db import InMemoryFamilyMemberRepository

    repo = InMemoryFamilyMemberRepository(clock=clock)
    repo.save(member, expected_version=None)
    for message in repo.outbox.get_pending():
        publish(message.payload)
"""
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
)
from db.memory import InMemoryFamilyMemberRepository, InMemoryOutbox

__all__ = [
    "IFamilyMemberRepository",
    "IOutboxRepository",
    "ISpecification",
    "OutboxMessage",
    "OutboxMessageStatus",
    "Page",
    "PageRequest",
    "ConcurrencyException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "InMemoryFamilyMemberRepository",
    "InMemoryOutbox",
]
