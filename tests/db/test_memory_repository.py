"""
Tests for db/memory.py - compare-and-swap member store with outbox.
"""
from datetime import date
from uuid import uuid4

import pytest

from db.interfaces import (
    ConcurrencyException,
    DuplicateEntityException,
    EntityNotFoundException,
    OutboxMessageStatus,
    PageRequest,
)
from db.memory import InMemoryFamilyMemberRepository, InMemoryOutbox
from domain.specifications import BelongsToFamilySpec, IsMinorSpec


@pytest.fixture
def repo(clock):
    return InMemoryFamilyMemberRepository(clock=clock)


@pytest.fixture
def saved(repo, make_member):
    member = make_member(drain=False)
    repo.save(member, expected_version=None)
    return member


# =============================================================================
# Save Tests
# =============================================================================

class TestSave:

    def test_new_member_drains_events_into_outbox(self, repo, saved):
        assert not saved.has_pending_events
        types = [m.event_type for m in repo.outbox.messages]
        assert types == ["FamilyMemberCreated", "DependencyAssessed"]
        assert all(m.aggregate_id == saved.id for m in repo.outbox.messages)
        assert all(m.aggregate_version == 1 for m in repo.outbox.messages)

    def test_new_member_accepts_zero(self, repo, make_member):
        member = make_member()
        repo.save(member, expected_version=0)
        assert len(repo) == 1

    def test_new_member_with_version_is_conflict(self, repo, make_member):
        member = make_member()
        with pytest.raises(ConcurrencyException) as exc_info:
            repo.save(member, expected_version=3)
        assert exc_info.value.actual_version is None
        assert len(repo) == 0

    def test_existing_id_without_version_is_duplicate(self, repo, saved):
        with pytest.raises(DuplicateEntityException):
            repo.save(saved, expected_version=None)

    def test_compare_and_swap(self, repo, saved):
        loaded = repo.get(saved.id)
        loaded.update_personal_info(occupation="Farmer")
        repo.save(loaded, expected_version=1)

        assert repo.get(saved.id).version == 2
        assert repo.get(saved.id).occupation == "Farmer"

    def test_stale_writer_loses(self, repo, saved):
        first = repo.get(saved.id)
        second = repo.get(saved.id)
        first.update_personal_info(occupation="Farmer")
        second.update_personal_info(occupation="Trader")
        repo.save(first, expected_version=1)

        with pytest.raises(ConcurrencyException) as exc_info:
            repo.save(second, expected_version=1)

        assert (exc_info.value.expected_version, exc_info.value.actual_version) == (1, 2)
        assert repo.get(saved.id).occupation == "Farmer"
        assert [e.event_type for e in second.domain_events] == ["FamilyMemberUpdated"]

    def test_failed_save_adds_nothing_to_outbox(self, repo, saved):
        before = len(repo.outbox.messages)
        loaded = repo.get(saved.id)
        loaded.update_personal_info(occupation="Farmer")
        with pytest.raises(ConcurrencyException):
            repo.save(loaded, expected_version=7)
        assert len(repo.outbox.messages) == before
        assert loaded.has_pending_events


# =============================================================================
# Load and Query Tests
# =============================================================================

class TestQueries:

    def test_get_missing_raises(self, repo):
        with pytest.raises(EntityNotFoundException):
            repo.get("nobody")
        assert repo.get_or_none("nobody") is None

    def test_loads_are_independent(self, repo, saved):
        one = repo.get(saved.id)
        two = repo.get(saved.id)
        one.mark_as_deceased(date(2024, 1, 1))
        assert two.is_alive
        assert repo.get(saved.id).is_alive

    def test_find_and_count(self, repo, make_member, minor):
        repo.save(make_member(), None)
        repo.save(minor, None)
        repo.save(make_member(family_id="fam-002"), None)

        assert len(repo.find(IsMinorSpec())) == 1
        assert repo.count(BelongsToFamilySpec("fam-001")) == 2
        assert repo.count() == 3

    def test_find_page(self, repo, make_member):
        for _ in range(5):
            repo.save(make_member(), None)

        page = repo.find_page(BelongsToFamilySpec("fam-001"), PageRequest(page=2, page_size=2))

        assert page.total == 5
        assert len(page.items) == 2
        assert page.total_pages == 3
        assert page.has_next and page.has_previous


# =============================================================================
# Outbox Tests
# =============================================================================

class TestOutbox:

    def test_pending_and_completed(self, repo, saved):
        pending = repo.outbox.get_pending()
        assert len(pending) == 2
        repo.outbox.mark_completed(pending[0].id)
        assert len(repo.outbox.get_pending()) == 1
        assert repo.outbox.messages[0].processed_at is not None

    def test_failure_retries_until_limit(self, repo, saved):
        message = repo.outbox.get_pending()[0]
        for _ in range(InMemoryOutbox.MAX_RETRIES - 1):
            repo.outbox.mark_failed(message.id, "broker unavailable")
            assert message.status is OutboxMessageStatus.PENDING
        repo.outbox.mark_failed(message.id, "broker unavailable")
        assert message.status is OutboxMessageStatus.FAILED
        assert message.retry_count == InMemoryOutbox.MAX_RETRIES

    def test_failure_without_retry(self, repo, saved):
        message = repo.outbox.get_pending()[0]
        repo.outbox.mark_failed(message.id, "poison message", retry=False)
        assert message.status is OutboxMessageStatus.FAILED
        assert message.error_message == "poison message"

    def test_unknown_message(self):
        with pytest.raises(EntityNotFoundException):
            InMemoryOutbox().mark_completed(uuid4())

    def test_payload_is_serialized_event(self, repo, saved):
        payload = repo.outbox.messages[0].payload
        assert payload["event_type"] == "FamilyMemberCreated"
        assert payload["aggregate_id"] == saved.id
