"""
Tests for domain/value_objects/life_status.py - the ALIVE / MISSING / DECEASED machine.
"""
from datetime import date

import pytest

from config import Config, DataQualityConfig, set_config
from core.errors import ValueObjectValidationError
from domain.value_objects.base import DataQualityIssue
from domain.value_objects.life_status import LifeState, LifeStatus

TODAY = date(2024, 6, 1)


# =============================================================================
# Construction Tests
# =============================================================================

class TestLifeStatusConstruction:

    def test_alive_is_initial(self):
        status = LifeStatus.alive()
        assert status.state is LifeState.ALIVE
        assert status.is_alive
        assert not status.has_advisories

    def test_state_text_coerced(self):
        assert LifeStatus(state="missing", missing_since=date(2020, 1, 1)).is_missing

    def test_unknown_state_is_validation_error(self):
        with pytest.raises(ValueObjectValidationError) as exc_info:
            LifeStatus(state="ZOMBIE")
        assert exc_info.value.field_name == "state"

    def test_death_date_and_missing_since_together_rejected(self):
        with pytest.raises(ValueObjectValidationError, match="both deceased and missing"):
            LifeStatus(
                state=LifeState.DECEASED,
                date_of_death=date(2023, 1, 1),
                missing_since=date(2020, 1, 1),
            )

    def test_death_fields_rejected_while_alive(self):
        with pytest.raises(ValueObjectValidationError) as exc_info:
            LifeStatus(state=LifeState.ALIVE, place_of_death="Nakuru")
        assert exc_info.value.field_name == "place_of_death"

    def test_unknown_date_of_death_is_advisory(self):
        status = LifeStatus(state=LifeState.DECEASED, death_certificate_number="DC/2001/0042")
        assert status.is_deceased
        assert [a.code for a in status.advisories] == [DataQualityIssue.UNKNOWN_DATE_OF_DEATH]

    def test_unknown_date_of_death_can_be_escalated(self):
        set_config(Config(data_quality=DataQualityConfig(escalate=frozenset({"UNKNOWN_DATE_OF_DEATH"}))))
        with pytest.raises(ValueObjectValidationError) as exc_info:
            LifeStatus(state=LifeState.DECEASED)
        assert exc_info.value.field_name == "date_of_death"
        assert exc_info.value.details["anomaly"] == "UNKNOWN_DATE_OF_DEATH"

    def test_missing_requires_since(self):
        with pytest.raises(ValueObjectValidationError):
            LifeStatus(state=LifeState.MISSING)

    def test_death_without_certificate_is_advisory(self):
        status = LifeStatus(state=LifeState.DECEASED, date_of_death=date(2023, 1, 1))
        assert [a.code for a in status.advisories] == [DataQualityIssue.MISSING_DEATH_CERTIFICATE]

    def test_death_with_certificate_has_no_advisory(self):
        status = LifeStatus(
            state=LifeState.DECEASED,
            date_of_death=date(2023, 1, 1),
            death_certificate_number="DC/2023/0099",
        )
        assert not status.has_advisories


# =============================================================================
# Transition Tests
# =============================================================================

class TestLifeStatusTransitions:

    def test_alive_to_deceased(self):
        status = LifeStatus.alive().mark_deceased(date(2024, 5, 1), TODAY, place_of_death="Kisumu")
        assert status.is_deceased
        assert status.place_of_death == "Kisumu"

    def test_deceased_is_terminal(self):
        deceased = LifeStatus.alive().mark_deceased(date(2024, 5, 1), TODAY)
        with pytest.raises(ValueObjectValidationError, match="already deceased"):
            deceased.mark_deceased(date(2024, 5, 2), TODAY)
        with pytest.raises(ValueObjectValidationError):
            deceased.mark_missing(date(2024, 5, 2), TODAY)
        with pytest.raises(ValueObjectValidationError):
            deceased.mark_found()

    def test_future_death_rejected(self):
        with pytest.raises(ValueObjectValidationError, match="future"):
            LifeStatus.alive().mark_deceased(date(2024, 6, 2), TODAY)

    def test_missing_then_found(self):
        missing = LifeStatus.alive().mark_missing(date(2023, 1, 1), TODAY, last_seen_location="Garissa")
        assert missing.last_seen_location == "Garissa"
        found = missing.mark_found()
        assert found == LifeStatus.alive()

    def test_missing_then_deceased_clears_missing_fields(self):
        missing = LifeStatus.alive().mark_missing(date(2023, 1, 1), TODAY)
        deceased = missing.mark_deceased(date(2024, 1, 1), TODAY)
        assert deceased.is_deceased
        assert deceased.missing_since is None

    def test_cannot_go_missing_twice(self):
        missing = LifeStatus.alive().mark_missing(date(2023, 1, 1), TODAY)
        with pytest.raises(ValueObjectValidationError):
            missing.mark_missing(date(2023, 2, 1), TODAY)

    def test_only_missing_can_be_found(self):
        with pytest.raises(ValueObjectValidationError, match="Only a missing person"):
            LifeStatus.alive().mark_found()


# =============================================================================
# Presumption of Death Tests
# =============================================================================

class TestPresumptionOfDeath:

    def test_seven_years_missing_is_eligible(self):
        missing = LifeStatus(state=LifeState.MISSING, missing_since=date(2017, 6, 1))
        assert missing.years_missing(TODAY) == 7
        assert missing.is_eligible_for_presumption_of_death(TODAY)

    def test_just_under_seven_years_is_not(self):
        missing = LifeStatus(state=LifeState.MISSING, missing_since=date(2017, 6, 2))
        assert not missing.is_eligible_for_presumption_of_death(TODAY)

    def test_predicate_never_transitions(self):
        missing = LifeStatus(state=LifeState.MISSING, missing_since=date(2010, 1, 1))
        missing.is_eligible_for_presumption_of_death(TODAY)
        assert missing.is_missing

    def test_alive_is_never_eligible(self):
        assert not LifeStatus.alive().is_eligible_for_presumption_of_death(TODAY)
