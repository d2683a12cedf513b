"""
Mirathi - Domain Layer

The family-member core of a Kenyan succession platform:
    - ``FamilyMember`` aggregate with versioned mutations and domain events
    - Value objects for names, identity documents, life status and geography
    - Statutory policies returning ``Verdict`` results
    - Specifications for repository queries

Usage:
    from domain import FamilyMember

    member = FamilyMember.create({"family_id": "fam-1", "first_name": "Wanjiku", "last_name": "Kamau"})
    member.mark_as_deceased(date(2024, 3, 1), recorded_by="registrar")
"""
from domain.entities import AggregateRoot, Entity
from domain.events import (
    AgeRecalculated,
    DependencyAssessed,
    DisabilityStatusChanged,
    DomainEvent,
    FamilyMemberArchived,
    FamilyMemberCreated,
    FamilyMemberDeceased,
    FamilyMemberUnarchived,
    FamilyMemberUpdated,
    IdentityVerified,
    MissingStatusChanged,
    PolygamousHouseAssigned,
    StatutoryStatusChanged,
)
from domain.family_member import DERIVED_ONLY_FIELDS, FamilyMember
from domain.records import FamilyMemberFacts, FamilyMemberRecord
from domain.specifications import (
    BelongsToFamilySpec,
    FamilyMemberSpecBuilder,
    InPolygamousHouseSpec,
    IsArchivedSpec,
    IsDeceasedSpec,
    IsIdentityVerifiedSpec,
    IsMinorSpec,
    IsPotentialDependantSpec,
)

__all__ = [
    # Base classes
    "Entity",
    "AggregateRoot",
    # Aggregate
    "FamilyMember",
    "DERIVED_ONLY_FIELDS",
    "FamilyMemberFacts",
    "FamilyMemberRecord",
    # Events
    "DomainEvent",
    "FamilyMemberCreated",
    "FamilyMemberUpdated",
    "FamilyMemberArchived",
    "FamilyMemberUnarchived",
    "FamilyMemberDeceased",
    "AgeRecalculated",
    "MissingStatusChanged",
    "IdentityVerified",
    "DependencyAssessed",
    "DisabilityStatusChanged",
    "PolygamousHouseAssigned",
    "StatutoryStatusChanged",
    # Specifications
    "IsMinorSpec",
    "IsDeceasedSpec",
    "IsArchivedSpec",
    "IsIdentityVerifiedSpec",
    "IsPotentialDependantSpec",
    "InPolygamousHouseSpec",
    "BelongsToFamilySpec",
    "FamilyMemberSpecBuilder",
]
