"""
Mirathi - Domain Specifications

Composable predicates over ``FamilyMember``, built on the Specification
Pattern from ``db.interfaces``. Combine with ``&``, ``|`` and ``~``.

Usage:
    from domain.specifications import BelongsToFamilySpec, IsMinorSpec, IsDeceasedSpec

    spec = BelongsToFamilySpec("fam-1") & IsMinorSpec() & ~IsDeceasedSpec()
    minors = repo.find(spec)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from db.interfaces import ISpecification, TrueSpecification
from domain.family_member import FamilyMember


# =============================================================================
# STATUS SPECIFICATIONS
# =============================================================================


@dataclass
class IsMinorSpec(ISpecification[FamilyMember]):
    """Living members below the age of majority."""

    def is_satisfied_by(self, entity: FamilyMember) -> bool:
        return entity.is_minor

    def to_query_params(self) -> Dict[str, Any]:
        return {"is_minor": True}


@dataclass
class IsDeceasedSpec(ISpecification[FamilyMember]):

    def is_satisfied_by(self, entity: FamilyMember) -> bool:
        return entity.is_deceased

    def to_query_params(self) -> Dict[str, Any]:
        return {"life_state": "DECEASED"}


@dataclass
class IsArchivedSpec(ISpecification[FamilyMember]):

    def is_satisfied_by(self, entity: FamilyMember) -> bool:
        return entity.is_archived

    def to_query_params(self) -> Dict[str, Any]:
        return {"is_archived": True}


@dataclass
class IsIdentityVerifiedSpec(ISpecification[FamilyMember]):
    """Members whose national ID or passport has been verified."""

    def is_satisfied_by(self, entity: FamilyMember) -> bool:
        return entity.identity.legally_verified

    def to_query_params(self) -> Dict[str, Any]:
        return {"legally_verified": True}


@dataclass
class IsPotentialDependantSpec(ISpecification[FamilyMember]):
    """Members who may claim as S.29 dependants."""

    def is_satisfied_by(self, entity: FamilyMember) -> bool:
        return entity.is_potential_dependant

    def to_query_params(self) -> Dict[str, Any]:
        return {"is_potential_dependant": True}


# =============================================================================
# MEMBERSHIP SPECIFICATIONS
# =============================================================================


@dataclass
class InPolygamousHouseSpec(ISpecification[FamilyMember]):
    house_id: str

    def is_satisfied_by(self, entity: FamilyMember) -> bool:
        return entity.polygamous_house_id == self.house_id

    def to_query_params(self) -> Dict[str, Any]:
        return {"polygamous_house_id": self.house_id}


@dataclass
class BelongsToFamilySpec(ISpecification[FamilyMember]):
    family_id: str

    def is_satisfied_by(self, entity: FamilyMember) -> bool:
        return entity.family_id == self.family_id

    def to_query_params(self) -> Dict[str, Any]:
        return {"family_id": self.family_id}


# =============================================================================
# COMPOSITE SPECIFICATION BUILDER
# =============================================================================


class FamilyMemberSpecBuilder:
    """
    Fluent builder for composing member specifications.

    Usage:
        spec = (FamilyMemberSpecBuilder()
            .in_family("fam-1")
            .minors()
            .build())
    """

    def __init__(self) -> None:
        self._specs: List[ISpecification[FamilyMember]] = []

    def in_family(self, family_id: str) -> "FamilyMemberSpecBuilder":
        self._specs.append(BelongsToFamilySpec(family_id))
        return self

    def in_house(self, house_id: str) -> "FamilyMemberSpecBuilder":
        self._specs.append(InPolygamousHouseSpec(house_id))
        return self

    def minors(self) -> "FamilyMemberSpecBuilder":
        self._specs.append(IsMinorSpec())
        return self

    def living(self) -> "FamilyMemberSpecBuilder":
        self._specs.append(~IsDeceasedSpec())
        return self

    def active(self) -> "FamilyMemberSpecBuilder":
        self._specs.append(~IsArchivedSpec())
        return self

    def verified(self) -> "FamilyMemberSpecBuilder":
        self._specs.append(IsIdentityVerifiedSpec())
        return self

    def potential_dependants(self) -> "FamilyMemberSpecBuilder":
        self._specs.append(IsPotentialDependantSpec())
        return self

    def build(self) -> ISpecification[FamilyMember]:
        """Build the composite specification."""
        if not self._specs:
            return TrueSpecification()

        result = self._specs[0]
        for spec in self._specs[1:]:
            result = result.and_(spec)
        return result
