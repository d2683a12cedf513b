"""
Mirathi - Life Status

Three-state lifecycle: ALIVE (initial), MISSING, DECEASED (terminal).

    ALIVE   -> DECEASED | MISSING
    MISSING -> ALIVE (found) | DECEASED
    DECEASED: no transitions

State-specific fields are only valid in their owning state. The
presumption-of-death check is a predicate; it never transitions.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from config import get_config
from domain.value_objects.base import DataQualityIssue, ValueObject, coerce_enum
from domain.value_objects.personal import years_between


class LifeState(str, Enum):
    ALIVE = "ALIVE"
    DECEASED = "DECEASED"
    MISSING = "MISSING"


_DECEASED_FIELDS = ("date_of_death", "place_of_death", "cause_of_death", "death_certificate_number")
_MISSING_FIELDS = ("missing_since", "last_seen_location")


@dataclass(frozen=True, slots=True)
class LifeStatus(ValueObject):
    state: LifeState = LifeState.ALIVE
    date_of_death: Optional[date] = None
    place_of_death: Optional[str] = None
    cause_of_death: Optional[str] = None
    death_certificate_number: Optional[str] = None
    missing_since: Optional[date] = None
    last_seen_location: Optional[str] = None

    def normalize(self) -> None:
        coerce_enum(self, "state", LifeState)
        if self.state is None:
            raise self._invalid("Life state is required", "state")

    def validate(self) -> None:
        if self.date_of_death is not None and self.missing_since is not None:
            raise self._invalid(
                "A person cannot be both deceased and missing",
                "state",
                date_of_death=self.date_of_death,
                missing_since=self.missing_since,
            )

        if self.state is not LifeState.DECEASED:
            self._reject_fields(_DECEASED_FIELDS)
        if self.state is not LifeState.MISSING:
            self._reject_fields(_MISSING_FIELDS)

        if self.state is LifeState.DECEASED:
            if self.date_of_death is None:
                self._advise(
                    DataQualityIssue.UNKNOWN_DATE_OF_DEATH,
                    "date_of_death",
                    "Death recorded without a date of death",
                )
            if not self.death_certificate_number:
                self._advise(
                    DataQualityIssue.MISSING_DEATH_CERTIFICATE,
                    "death_certificate_number",
                    "Death recorded without a death certificate",
                )
        if self.state is LifeState.MISSING and self.missing_since is None:
            raise self._invalid("Missing status requires a missing-since date", "missing_since")

    def _reject_fields(self, names: tuple) -> None:
        for name in names:
            if getattr(self, name) is not None:
                raise self._invalid(
                    f"{name} is not valid while {self.state.value}",
                    name,
                    state=self.state.value,
                )

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @classmethod
    def alive(cls) -> "LifeStatus":
        return cls()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def mark_deceased(
        self,
        date_of_death: date,
        today: date,
        place_of_death: Optional[str] = None,
        cause_of_death: Optional[str] = None,
        death_certificate_number: Optional[str] = None,
    ) -> "LifeStatus":
        if self.is_deceased:
            raise self._invalid("Person is already deceased", "state", state=self.state.value)
        if date_of_death > today:
            raise self._invalid(
                "Date of death cannot be in the future",
                "date_of_death",
                value=date_of_death,
                today=today,
            )
        return LifeStatus(
            state=LifeState.DECEASED,
            date_of_death=date_of_death,
            place_of_death=place_of_death,
            cause_of_death=cause_of_death,
            death_certificate_number=death_certificate_number,
        )

    def mark_missing(
        self,
        missing_since: date,
        today: date,
        last_seen_location: Optional[str] = None,
    ) -> "LifeStatus":
        if self.state is not LifeState.ALIVE:
            raise self._invalid(
                f"Cannot mark a {self.state.value.lower()} person as missing",
                "state",
                state=self.state.value,
            )
        if missing_since > today:
            raise self._invalid(
                "Missing-since date cannot be in the future",
                "missing_since",
                value=missing_since,
                today=today,
            )
        return LifeStatus(
            state=LifeState.MISSING,
            missing_since=missing_since,
            last_seen_location=last_seen_location,
        )

    def mark_found(self) -> "LifeStatus":
        if self.state is not LifeState.MISSING:
            raise self._invalid("Only a missing person can be found", "state", state=self.state.value)
        return LifeStatus.alive()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def is_alive(self) -> bool:
        return self.state is LifeState.ALIVE

    @property
    def is_deceased(self) -> bool:
        return self.state is LifeState.DECEASED

    @property
    def is_missing(self) -> bool:
        return self.state is LifeState.MISSING

    def years_missing(self, today: date) -> int:
        if self.missing_since is None:
            return 0
        return max(0, years_between(self.missing_since, today))

    def is_eligible_for_presumption_of_death(self, today: date) -> bool:
        """Missing continuously for the statutory period (Evidence Act S.118A)."""
        if not self.is_missing:
            return False
        return self.years_missing(today) >= get_config().statutory.presumption_of_death_years

    def _derived_projection(self) -> Dict[str, Any]:
        return {
            "is_alive": self.is_alive,
            "is_deceased": self.is_deceased,
            "is_missing": self.is_missing,
        }
