"""
Mirathi - S.40 Polygamous House Assignment

Under LSA S.40 an intestate polygamous estate is divided among houses,
each headed by a wife. The headship gender rule is configuration
(``StatutoryConfig.house_head_genders``); an empty set disables it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, FrozenSet, Optional, Sequence

from config import get_config
from domain.policies.base import Check, StatutoryPolicy, Verdict

if TYPE_CHECKING:
    from domain.family_member import FamilyMember

S40_CITATION = "Law of Succession Act (Cap 160), s. 40"


@dataclass(frozen=True)
class HouseAssignmentContext:
    member: "FamilyMember"
    house_id: str
    house_order: int
    head_genders: Optional[FrozenSet[str]] = None

    @property
    def allowed_genders(self) -> FrozenSet[str]:
        if self.head_genders is not None:
            return self.head_genders
        return get_config().statutory.house_head_genders


class PolygamousHouseAssignmentPolicy(StatutoryPolicy[HouseAssignmentContext]):
    name = "polygamous_house_assignment"
    citation = S40_CITATION

    def checks(self) -> Sequence[Check[HouseAssignmentContext]]:
        return (
            Check(1, "house_identified", self._house_identified),
            Check(2, "member_alive", self._member_alive),
            Check(3, "house_order", self._house_order),
            Check(4, "headship_gender", self._headship_gender),
        )

    @staticmethod
    def _house_identified(ctx: HouseAssignmentContext) -> Optional[Verdict]:
        if not ctx.house_id or not ctx.house_id.strip():
            return Verdict.reject("House identifier is required", S40_CITATION)
        return None

    @staticmethod
    def _member_alive(ctx: HouseAssignmentContext) -> Optional[Verdict]:
        if ctx.member.is_deceased:
            return Verdict.reject("A deceased member cannot be assigned to a house", S40_CITATION)
        return None

    @staticmethod
    def _house_order(ctx: HouseAssignmentContext) -> Optional[Verdict]:
        if ctx.house_order < 1:
            return Verdict.reject(f"House order must be 1 or greater, got {ctx.house_order}", S40_CITATION)
        return None

    @staticmethod
    def _headship_gender(ctx: HouseAssignmentContext) -> Optional[Verdict]:
        allowed = ctx.allowed_genders
        if not allowed:
            return None
        gender = ctx.member.gender
        if gender is None:
            return Verdict.reject_for_review(
                "House head gender is not recorded", S40_CITATION
            )
        if gender.value not in allowed:
            return Verdict.reject(
                f"House head must be {' or '.join(sorted(allowed))}, member is {gender.value}",
                S40_CITATION,
            )
        return None
