"""
Mirathi - Test Configuration

Pytest fixtures shared by all test layers: a pinned clock, isolated
configuration and builders for family members in common states.
"""
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict

import pytest

from config import Config, reload_config, set_config
from core.clock import FixedClock
from domain.family_member import FamilyMember

TODAY = date(2024, 6, 1)
NOW = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)


def years_ago(years: int, today: date = TODAY) -> date:
    """Same calendar day ``years`` before ``today``."""
    return today.replace(year=today.year - years)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Fresh configuration per test; env overrides do not leak between tests."""
    for name in ("DATA_QUALITY_ESCALATE", "HOUSE_HEAD_GENDERS", "AGE_OF_MAJORITY"):
        monkeypatch.delenv(name, raising=False)
    config = set_config(Config())
    yield config
    reload_config()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def base_facts() -> Dict[str, Any]:
    """Minimal valid facts for a living adult."""
    return {
        "family_id": "fam-001",
        "first_name": "Wanjiku",
        "middle_name": "Njeri",
        "last_name": "Kamau",
        "date_of_birth": years_ago(40),
        "gender": "FEMALE",
        "national_id": "12345678",
        "created_by": "registrar-1",
    }


@pytest.fixture
def make_member(clock, base_facts) -> Callable[..., FamilyMember]:
    """Build a member from ``base_facts`` overridden by keyword arguments."""

    def _make(drain: bool = True, **overrides: Any) -> FamilyMember:
        facts = {**base_facts, **overrides}
        member = FamilyMember.create(facts, clock=clock)
        if drain:
            member.drain_events()
        return member

    return _make


@pytest.fixture
def adult(make_member) -> FamilyMember:
    return make_member()


@pytest.fixture
def verified_adult(make_member) -> FamilyMember:
    member = make_member()
    member.verify_national_id("registrar-1", "IPRS")
    member.drain_events()
    return member


@pytest.fixture
def make_verified(make_member) -> Callable[..., FamilyMember]:
    """Like ``make_member`` but with the national ID already verified."""

    def _make(**overrides: Any) -> FamilyMember:
        member = make_member(**overrides)
        member.verify_national_id("registrar-1", "IPRS")
        member.drain_events()
        return member

    return _make


@pytest.fixture
def minor(make_member) -> FamilyMember:
    return make_member(
        first_name="Baraka",
        middle_name=None,
        date_of_birth=years_ago(6),
        gender="MALE",
        national_id=None,
        birth_certificate_entry_number="BC/2018/0042",
    )
