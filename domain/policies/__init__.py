"""
Mirathi - Statutory Policies

Each policy evaluates one question under Kenyan family and succession
law and returns a ``Verdict``; none of them raise for a failed rule.
"""
from domain.policies.adoption import AdoptionContext, AdoptionEligibilityPolicy, ParentalConsent
from domain.policies.base import Check, StatutoryPolicy, Verdict
from domain.policies.cohabitation import (
    CohabitationContext,
    CohabitationEvidence,
    CohabitationInterruption,
    CohabitationPolicy,
    CohabitationRecognition,
    EvidenceStrength,
)
from domain.policies.dependency import (
    DependantClaimContext,
    DependencyAssessment,
    DependencyLevel,
    DependencyPolicy,
    assess_dependency,
    dependency_basis,
)
from domain.policies.guardianship import GuardianshipContext, GuardianshipEligibilityPolicy
from domain.policies.inheritance import InheritanceContext, InheritanceEligibilityPolicy
from domain.policies.polygamy import HouseAssignmentContext, PolygamousHouseAssignmentPolicy

__all__ = [
    "Verdict",
    "Check",
    "StatutoryPolicy",
    # Dependency (LSA s. 29)
    "DependencyLevel",
    "DependencyAssessment",
    "DependantClaimContext",
    "DependencyPolicy",
    "assess_dependency",
    "dependency_basis",
    # Polygamy (LSA s. 40)
    "HouseAssignmentContext",
    "PolygamousHouseAssignmentPolicy",
    # Inheritance
    "InheritanceContext",
    "InheritanceEligibilityPolicy",
    # Adoption
    "ParentalConsent",
    "AdoptionContext",
    "AdoptionEligibilityPolicy",
    # Guardianship
    "GuardianshipContext",
    "GuardianshipEligibilityPolicy",
    # Cohabitation
    "CohabitationRecognition",
    "EvidenceStrength",
    "CohabitationInterruption",
    "CohabitationEvidence",
    "CohabitationContext",
    "CohabitationPolicy",
]
