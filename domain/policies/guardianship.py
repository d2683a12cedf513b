"""
Mirathi - Guardianship Eligibility

Appointment of a guardian for a minor (or a person lacking capacity)
under the Children Act 2022 and LSA S.58.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Optional, Sequence

from config import StatutoryConfig, get_config
from domain.policies.base import Check, StatutoryPolicy, Verdict
from domain.value_objects.personal import years_between

if TYPE_CHECKING:
    from domain.family_member import FamilyMember

GUARDIANSHIP_CITATION = "Children Act 2022, s. 102"
LSA_GUARDIANSHIP_CITATION = "Law of Succession Act (Cap 160), s. 58"


@dataclass(frozen=True)
class GuardianshipContext:
    guardian: "FamilyMember"
    ward: "FamilyMember"
    is_relative: bool = False
    today: Optional[date] = None

    @property
    def as_of(self) -> date:
        return self.today or self.guardian.clock.today()

    def age_of(self, member: "FamilyMember") -> Optional[int]:
        if member.date_of_birth is None:
            return None
        return years_between(member.date_of_birth, self.as_of)


class GuardianshipEligibilityPolicy(StatutoryPolicy[GuardianshipContext]):
    name = "guardianship_eligibility"
    citation = GUARDIANSHIP_CITATION

    def __init__(self, statutory: Optional[StatutoryConfig] = None) -> None:
        StatutoryPolicy.__init__(self)
        self._statutory = statutory

    @property
    def rules(self) -> StatutoryConfig:
        return self._statutory or get_config().statutory

    def checks(self) -> Sequence[Check[GuardianshipContext]]:
        return (
            Check(1, "guardian_identity_verified", self._identity),
            Check(2, "guardian_alive_and_active", self._alive),
            Check(3, "guardian_capacity", self._capacity),
            Check(4, "guardian_minimum_age", self._minimum_age),
            Check(5, "ward_needs_guardian", self._ward),
            Check(6, "age_gap", self._age_gap),
            Check(7, "guardian_maximum_age", self._maximum_age),
        )

    @staticmethod
    def _identity(ctx: GuardianshipContext) -> Optional[Verdict]:
        if not ctx.guardian.identity.legally_verified:
            return Verdict.reject("Guardian identity is not legally verified", GUARDIANSHIP_CITATION)
        return None

    @staticmethod
    def _alive(ctx: GuardianshipContext) -> Optional[Verdict]:
        if not ctx.guardian.life_status.is_alive or ctx.guardian.is_archived:
            return Verdict.reject("Guardian must be alive, present and active", GUARDIANSHIP_CITATION)
        return None

    @staticmethod
    def _capacity(ctx: GuardianshipContext) -> Optional[Verdict]:
        disability = ctx.guardian.disability_status
        if disability is not None and disability.requires_supported_decision_making:
            return Verdict.reject_for_review(
                "Guardian requires supported decision making", LSA_GUARDIANSHIP_CITATION
            )
        return None

    def _minimum_age(self, ctx: GuardianshipContext) -> Optional[Verdict]:
        age = ctx.age_of(ctx.guardian)
        if age is None:
            return Verdict.reject_for_review("Guardian's date of birth is not recorded", GUARDIANSHIP_CITATION)
        if age < self.rules.guardian_min_age:
            return Verdict.reject(
                f"Guardian is {age}, below the minimum age of {self.rules.guardian_min_age}",
                GUARDIANSHIP_CITATION,
            )
        return None

    def _ward(self, ctx: GuardianshipContext) -> Optional[Verdict]:
        if ctx.ward.is_deceased:
            return Verdict.reject("Ward is deceased", GUARDIANSHIP_CITATION)
        if ctx.ward.is_minor:
            return None
        disability = ctx.ward.disability_status
        if disability is not None and disability.affects_legal_capacity:
            return None
        return Verdict.reject(
            "Ward is an adult with full legal capacity", GUARDIANSHIP_CITATION
        )

    def _age_gap(self, ctx: GuardianshipContext) -> Optional[Verdict]:
        if not ctx.ward.is_minor:
            return None
        guardian_age = ctx.age_of(ctx.guardian)
        ward_age = ctx.age_of(ctx.ward)
        if guardian_age is None or ward_age is None:
            return None
        gap = guardian_age - ward_age
        minimum = self.rules.guardian_min_age_gap
        if gap >= minimum:
            return None
        if ctx.is_relative:
            return Verdict.discretionary(
                f"Age gap of {gap} years is below {minimum}; acceptable for a relative at the court's discretion",
                GUARDIANSHIP_CITATION,
            )
        return Verdict.reject_for_review(
            f"Age gap of {gap} years is below the minimum of {minimum}", GUARDIANSHIP_CITATION
        )

    def _maximum_age(self, ctx: GuardianshipContext) -> Optional[Verdict]:
        age = ctx.age_of(ctx.guardian)
        if age is not None and age > self.rules.guardian_max_age:
            return Verdict.discretionary(
                f"Guardian is {age}, above the usual maximum of {self.rules.guardian_max_age}",
                GUARDIANSHIP_CITATION,
            )
        return None
