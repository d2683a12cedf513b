"""
Mirathi - Inheritance Eligibility

Whether a member can take a share on distribution: alive, active,
identity legally verified, and not missing. A missing member's share goes
to court: held in trust pending return, or, once the member can be
presumed dead, distributed on the court's ruling.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Optional, Sequence

from domain.policies.base import Check, StatutoryPolicy, Verdict

if TYPE_CHECKING:
    from domain.family_member import FamilyMember

DISTRIBUTION_CITATION = "Law of Succession Act (Cap 160), ss. 35-40"
PRESUMPTION_CITATION = "Evidence Act (Cap 80), s. 118A"


@dataclass(frozen=True)
class InheritanceContext:
    beneficiary: "FamilyMember"
    today: Optional[date] = None

    @property
    def as_of(self) -> date:
        return self.today or self.beneficiary.clock.today()


class InheritanceEligibilityPolicy(StatutoryPolicy[InheritanceContext]):
    name = "inheritance_eligibility"
    citation = DISTRIBUTION_CITATION

    def checks(self) -> Sequence[Check[InheritanceContext]]:
        return (
            Check(1, "beneficiary_alive", self._alive),
            Check(2, "beneficiary_active", self._active),
            Check(3, "identity_verified", self._identity_verified),
            Check(4, "beneficiary_present", self._present),
            Check(5, "personal_law", self._personal_law),
        )

    @staticmethod
    def _alive(ctx: InheritanceContext) -> Optional[Verdict]:
        if ctx.beneficiary.is_deceased:
            return Verdict.reject(
                "Deceased beneficiaries take only through their own estate", DISTRIBUTION_CITATION
            )
        return None

    @staticmethod
    def _active(ctx: InheritanceContext) -> Optional[Verdict]:
        if ctx.beneficiary.is_archived:
            return Verdict.reject("Beneficiary record is archived", DISTRIBUTION_CITATION)
        return None

    @staticmethod
    def _identity_verified(ctx: InheritanceContext) -> Optional[Verdict]:
        if not ctx.beneficiary.identity.legally_verified:
            return Verdict.reject_for_review(
                "Beneficiary identity is not legally verified", DISTRIBUTION_CITATION
            )
        return None

    @staticmethod
    def _present(ctx: InheritanceContext) -> Optional[Verdict]:
        status = ctx.beneficiary.life_status
        if not status.is_missing:
            return None
        if status.is_eligible_for_presumption_of_death(ctx.as_of):
            return Verdict.reject_for_review(
                "Beneficiary is eligible for presumption of death; a court must rule before distribution",
                PRESUMPTION_CITATION,
            )
        return Verdict.reject_for_review(
            "Beneficiary is missing; share to be held in trust pending return",
            DISTRIBUTION_CITATION,
        )

    @staticmethod
    def _personal_law(ctx: InheritanceContext) -> Optional[Verdict]:
        if not ctx.beneficiary.identity.customary_law_applicable:
            return Verdict.approve(
                "Law of Succession Act (Cap 160), s. 2(3)",
                warning="Estate may devolve under Islamic or Hindu personal law",
            )
        return None
