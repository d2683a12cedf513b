"""
Tests for domain/policies/cohabitation.py - S.3(5) / S.29(5) cohabitation claims.
"""
from datetime import date, datetime

import pytest

from core.clock import FixedClock
from core.errors import ValueObjectValidationError
from domain.policies.cohabitation import (
    CohabitationContext,
    CohabitationEvidence,
    CohabitationInterruption,
    CohabitationPolicy,
    CohabitationRecognition,
    EvidenceStrength,
)

TODAY = date(2024, 6, 1)


def evidence(**overrides):
    values = {
        "start_date": date(2015, 1, 1),
        "recognition": CohabitationRecognition.FAMILY,
        "evidence_documents": ("tenancy", "photos", "school-forms", "church-letter"),
        "witnesses": ("chief",),
    }
    values.update(overrides)
    return CohabitationEvidence(**values)


@pytest.fixture
def policy():
    return CohabitationPolicy()


# =============================================================================
# Evidence Tests
# =============================================================================

class TestCohabitationEvidence:

    def test_score_and_strength(self):
        ev = evidence()
        assert ev.evidence_score == 55
        assert ev.evidence_strength is EvidenceStrength.MODERATE

    def test_strong_evidence(self):
        ev = evidence(
            recognition="both",
            witnesses=("chief", "pastor", "neighbour", "sister"),
        )
        assert ev.recognition is CohabitationRecognition.BOTH
        assert ev.evidence_score == 80
        assert ev.evidence_strength is EvidenceStrength.STRONG

    def test_score_capped(self):
        ev = evidence(
            recognition=CohabitationRecognition.BOTH,
            evidence_documents=tuple(f"doc-{i}" for i in range(10)),
            witnesses=tuple(f"w-{i}" for i in range(10)),
            is_registered=True,
        )
        assert ev.evidence_score == 100

    def test_interruptions_shorten_duration(self):
        ev = evidence(
            start_date=date(2018, 1, 1),
            interruptions=(CohabitationInterruption(date(2019, 1, 1), date(2021, 1, 1)),),
        )
        assert 4.4 < ev.effective_years(TODAY) < 4.5
        assert not ev.qualifies_under_s29_5(TODAY)

    def test_qualifies(self):
        assert evidence().qualifies_under_s29_5(TODAY)
        assert not evidence(recognition=CohabitationRecognition.NONE).qualifies_under_s29_5(TODAY)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueObjectValidationError) as exc_info:
            evidence(end_date=date(2014, 1, 1))
        assert exc_info.value.field_name == "end_date"

    def test_unknown_recognition_is_validation_error(self):
        with pytest.raises(ValueObjectValidationError) as exc_info:
            evidence(recognition="VILLAGE")
        assert exc_info.value.field_name == "recognition"

    def test_interruption_outside_relationship_rejected(self):
        with pytest.raises(ValueObjectValidationError):
            evidence(interruptions=(CohabitationInterruption(date(2014, 1, 1), date(2016, 1, 1)),))

    def test_projection_includes_score(self):
        projection = evidence().to_projection()
        assert projection["evidence_score"] == 55
        assert projection["evidence_strength"] == "MODERATE"
        assert projection["is_ongoing"] is True


# =============================================================================
# Policy Tests
# =============================================================================

class TestCohabitationPolicy:

    def test_qualifying_relationship(self, policy):
        verdict = policy.evaluate(CohabitationContext(evidence(), TODAY))
        assert verdict.is_valid
        assert not verdict.requires_court_discretion

    def test_ended_before_death_rejected(self, policy):
        verdict = policy.evaluate(CohabitationContext(evidence(end_date=date(2023, 1, 1)), TODAY))
        assert verdict.is_hard_rejection
        assert verdict.check == "1:relationship_subsisting"

    def test_ended_by_death_counts_as_subsisting(self, policy):
        verdict = policy.evaluate(
            CohabitationContext(evidence(end_date=date(2023, 1, 1)), TODAY, ended_by_death=True)
        )
        assert verdict.is_valid

    def test_short_relationship_rejected(self, policy):
        verdict = policy.evaluate(CohabitationContext(evidence(start_date=date(2021, 1, 1)), TODAY))
        assert not verdict.is_valid
        assert "minimum duration of 5" in verdict.rejection_reason
        assert "s. 3(5)" in verdict.legal_citation

    def test_unrecognised_relationship_goes_to_court(self, policy):
        verdict = policy.evaluate(
            CohabitationContext(evidence(recognition=CohabitationRecognition.NONE), TODAY)
        )
        assert not verdict.is_valid
        assert verdict.requires_court_discretion

    def test_weak_evidence_is_discretionary(self, policy):
        verdict = policy.evaluate(
            CohabitationContext(evidence(evidence_documents=("photos",), witnesses=()), TODAY)
        )
        assert verdict.is_valid
        assert verdict.requires_court_discretion
        assert verdict.warning.startswith("Weak evidence")

    def test_evaluation_date_defaults_to_clock(self, policy):
        recent = evidence(start_date=date(2020, 1, 1))
        assert not policy.evaluate(CohabitationContext(recent, clock=FixedClock(datetime(2024, 6, 1)))).is_valid
        assert policy.evaluate(CohabitationContext(recent, clock=FixedClock(datetime(2026, 6, 1)))).is_valid
