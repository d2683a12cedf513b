"""
Mirathi - Adoption Eligibility (Children Act 2022, Part XIII)

Checks run from structurally fatal to discretionary:

 1. adopter identity legally verified
 2. adopter alive and active
 3. child is a minor
 4. adopter at least the minimum age             (hard)
 5. adopter not above the maximum age            (rejected, court may waive)
 6. minimum age gap between adopter and child    (relatives: discretionary)
 7. sole male adopter of a female child          (discretionary)
 8. non-resident adopter                         (discretionary)
 9. parental consent given or dispensed with     (rejected, court may dispense)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from config import StatutoryConfig, get_config
from domain.policies.base import Check, StatutoryPolicy, Verdict
from domain.value_objects.personal import Gender, years_between

if TYPE_CHECKING:
    from domain.family_member import FamilyMember

CHILDREN_ACT = "Children Act 2022"
ELIGIBILITY_CITATION = f"{CHILDREN_ACT}, s. 185"
RESTRICTIONS_CITATION = f"{CHILDREN_ACT}, s. 185(4)"
CONSENT_CITATION = f"{CHILDREN_ACT}, s. 187"


class ParentalConsent(str, Enum):
    GIVEN = "GIVEN"
    DISPENSED = "DISPENSED"
    NOT_GIVEN = "NOT_GIVEN"
    NOT_REQUIRED = "NOT_REQUIRED"


@dataclass(frozen=True)
class AdoptionContext:
    adopter: "FamilyMember"
    child: "FamilyMember"
    is_relative: bool = False
    is_joint_application: bool = False
    parental_consent: ParentalConsent = ParentalConsent.GIVEN
    today: Optional[date] = None

    @property
    def as_of(self) -> date:
        return self.today or self.adopter.clock.today()

    def age_of(self, member: "FamilyMember") -> Optional[int]:
        if member.date_of_birth is None:
            return None
        return years_between(member.date_of_birth, self.as_of)


class AdoptionEligibilityPolicy(StatutoryPolicy[AdoptionContext]):
    name = "adoption_eligibility"
    citation = ELIGIBILITY_CITATION

    def __init__(self, statutory: Optional[StatutoryConfig] = None) -> None:
        StatutoryPolicy.__init__(self)
        self._statutory = statutory

    @property
    def rules(self) -> StatutoryConfig:
        return self._statutory or get_config().statutory

    def checks(self) -> Sequence[Check[AdoptionContext]]:
        return (
            Check(1, "adopter_identity_verified", self._adopter_identity),
            Check(2, "adopter_alive_and_active", self._adopter_alive),
            Check(3, "child_is_minor", self._child_minor),
            Check(4, "adopter_minimum_age", self._minimum_age),
            Check(5, "adopter_maximum_age", self._maximum_age),
            Check(6, "age_gap", self._age_gap),
            Check(7, "sole_male_adopter_of_female_child", self._sole_male_adopter),
            Check(8, "non_resident_adopter", self._non_resident),
            Check(9, "parental_consent", self._consent),
        )

    @staticmethod
    def _adopter_identity(ctx: AdoptionContext) -> Optional[Verdict]:
        if not ctx.adopter.identity.legally_verified:
            return Verdict.reject("Adopter identity is not legally verified", ELIGIBILITY_CITATION)
        return None

    @staticmethod
    def _adopter_alive(ctx: AdoptionContext) -> Optional[Verdict]:
        if not ctx.adopter.life_status.is_alive:
            return Verdict.reject("Adopter must be alive and present", ELIGIBILITY_CITATION)
        if ctx.adopter.is_archived:
            return Verdict.reject("Adopter record is archived", ELIGIBILITY_CITATION)
        return None

    def _child_minor(self, ctx: AdoptionContext) -> Optional[Verdict]:
        age = ctx.age_of(ctx.child)
        if age is None:
            return Verdict.reject_for_review("Child's date of birth is not recorded", ELIGIBILITY_CITATION)
        if ctx.child.is_deceased or age >= self.rules.age_of_majority:
            return Verdict.reject("Only a living minor can be adopted", ELIGIBILITY_CITATION)
        return None

    def _minimum_age(self, ctx: AdoptionContext) -> Optional[Verdict]:
        age = ctx.age_of(ctx.adopter)
        if age is None:
            return Verdict.reject_for_review("Adopter's date of birth is not recorded", ELIGIBILITY_CITATION)
        minimum = self.rules.adoption_min_age
        if age < minimum:
            return Verdict.reject(
                f"Adopter is {age}, below the minimum age of {minimum}",
                ELIGIBILITY_CITATION,
            )
        return None

    def _maximum_age(self, ctx: AdoptionContext) -> Optional[Verdict]:
        age = ctx.age_of(ctx.adopter)
        maximum = self.rules.adoption_max_age
        if age is not None and age > maximum:
            return Verdict.reject_for_review(
                f"Adopter is {age}, above the maximum age of {maximum}",
                ELIGIBILITY_CITATION,
            )
        return None

    def _age_gap(self, ctx: AdoptionContext) -> Optional[Verdict]:
        adopter_age = ctx.age_of(ctx.adopter)
        child_age = ctx.age_of(ctx.child)
        if adopter_age is None or child_age is None:
            return None
        gap = adopter_age - child_age
        minimum = self.rules.adoption_min_age_gap
        if gap >= minimum:
            return None
        if ctx.is_relative:
            return Verdict.discretionary(
                f"Age gap of {gap} years is below {minimum}; relative adoption may be allowed by the court",
                RESTRICTIONS_CITATION,
            )
        return Verdict.reject(
            f"Age gap of {gap} years is below the minimum of {minimum}",
            RESTRICTIONS_CITATION,
        )

    @staticmethod
    def _sole_male_adopter(ctx: AdoptionContext) -> Optional[Verdict]:
        if ctx.is_joint_application:
            return None
        if ctx.adopter.gender is Gender.MALE and ctx.child.gender is Gender.FEMALE:
            return Verdict.discretionary(
                "Sole male applicant for a female child requires special circumstances",
                RESTRICTIONS_CITATION,
            )
        return None

    @staticmethod
    def _non_resident(ctx: AdoptionContext) -> Optional[Verdict]:
        if not ctx.adopter.identity.is_kenyan_citizen:
            return Verdict.discretionary(
                "Non-citizen adopter; inter-country adoption rules apply",
                f"{CHILDREN_ACT}, s. 186",
            )
        return None

    @staticmethod
    def _consent(ctx: AdoptionContext) -> Optional[Verdict]:
        if ctx.parental_consent is ParentalConsent.NOT_GIVEN:
            return Verdict.reject_for_review(
                "Parental consent has not been given or dispensed with",
                CONSENT_CITATION,
            )
        return None
