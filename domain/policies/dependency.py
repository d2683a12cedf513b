"""
Mirathi - S.29 Dependant Assessment

Law of Succession Act (Cap 160) S.29 lists who may apply for reasonable
provision from a deceased's estate. This module classifies a member's
dependency standing and evaluates whether they can be put forward as a
dependant.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Tuple

from domain.policies.base import Check, StatutoryPolicy, Verdict
from domain.value_objects.personal import DisabilitySeverity

if TYPE_CHECKING:
    from domain.family_member import FamilyMember

S29_CITATION = "Law of Succession Act (Cap 160), s. 29"


class DependencyLevel(str, Enum):
    NONE = "NONE"
    PARTIAL = "PARTIAL"
    FULL = "FULL"


@dataclass(frozen=True)
class DependencyAssessment:
    is_potential_dependant: bool
    level: DependencyLevel
    basis: Tuple[str, ...]
    legal_citation: str = S29_CITATION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_potential_dependant": self.is_potential_dependant,
            "dependency_level": self.level.value,
            "basis": list(self.basis),
            "legal_citation": self.legal_citation,
        }


def dependency_basis(member: "FamilyMember") -> Tuple[str, ...]:
    """Grounds on which ``member`` may be a dependant (empty when none)."""
    if member.is_deceased:
        return ()
    basis = []
    if member.is_minor:
        basis.append("MINOR")
    if member.is_student_age:
        basis.append("STUDENT_AGE")
    disability = member.disability_status
    if disability is not None and disability.has_disability:
        basis.append("DISABILITY")
    if disability is not None and disability.requires_supported_decision_making:
        basis.append("SUPPORTED_DECISION_MAKING")
    return tuple(basis)


def assess_dependency(member: "FamilyMember") -> DependencyAssessment:
    """
    Decision table, first match wins:

    ====================================================  =======
    not a potential dependant                             NONE
    SEVERE or PROFOUND disability                         FULL
    minor                                                 FULL
    MODERATE disability or supported decision making      PARTIAL
    student-age window                                    PARTIAL
    otherwise                                             NONE
    ====================================================  =======
    """
    basis = dependency_basis(member)
    if not basis:
        return DependencyAssessment(False, DependencyLevel.NONE, ())

    disability = member.disability_status
    severity = disability.highest_severity if disability is not None else None

    if severity in (DisabilitySeverity.SEVERE, DisabilitySeverity.PROFOUND):
        level = DependencyLevel.FULL
    elif member.is_minor:
        level = DependencyLevel.FULL
    elif severity is DisabilitySeverity.MODERATE or "SUPPORTED_DECISION_MAKING" in basis:
        level = DependencyLevel.PARTIAL
    elif member.is_student_age:
        level = DependencyLevel.PARTIAL
    else:
        level = DependencyLevel.NONE

    return DependencyAssessment(True, level, basis)


@dataclass(frozen=True)
class DependantClaimContext:
    claimant: "FamilyMember"
    relationship: Optional[str] = None


class DependencyPolicy(StatutoryPolicy[DependantClaimContext]):
    """Can this member be put forward as a S.29 dependant?"""

    name = "dependency"
    citation = S29_CITATION

    def checks(self) -> Sequence[Check[DependantClaimContext]]:
        return (
            Check(1, "claimant_alive", self._claimant_alive),
            Check(2, "claimant_active", self._claimant_active),
            Check(3, "potential_dependant", self._potential_dependant),
            Check(4, "dependency_level", self._dependency_level),
        )

    def assess(self, member: "FamilyMember") -> DependencyAssessment:
        return assess_dependency(member)

    @staticmethod
    def _claimant_alive(ctx: DependantClaimContext) -> Optional[Verdict]:
        if ctx.claimant.is_deceased:
            return Verdict.reject("Deceased persons cannot claim as dependants", S29_CITATION)
        return None

    @staticmethod
    def _claimant_active(ctx: DependantClaimContext) -> Optional[Verdict]:
        if ctx.claimant.is_archived:
            return Verdict.reject("Claimant record is archived", S29_CITATION)
        return None

    @staticmethod
    def _potential_dependant(ctx: DependantClaimContext) -> Optional[Verdict]:
        if not ctx.claimant.is_potential_dependant:
            return Verdict.reject_for_review(
                "Claimant is not a minor, student or person with disability; "
                "dependency must be proved as maintenance by the deceased",
                "Law of Succession Act (Cap 160), s. 29(b)",
            )
        return None

    @staticmethod
    def _dependency_level(ctx: DependantClaimContext) -> Optional[Verdict]:
        if ctx.claimant.dependency_level is DependencyLevel.PARTIAL:
            return Verdict.approve(
                S29_CITATION,
                warning="Partial dependency; provision is assessed by the court under s. 28",
            )
        return None
