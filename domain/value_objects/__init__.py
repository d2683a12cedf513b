"""
Mirathi - Value Objects

Immutable, self-validating values: names, identity documents, life
status, demographics, disability, and Kenyan geography.
"""
from domain.value_objects.base import Advisory, DataQualityIssue, ValueObject, project_value
from domain.value_objects.geographic import (
    CoordinateSource,
    GPSCoordinates,
    KenyanCounty,
    KenyanLocation,
)
from domain.value_objects.identity import (
    AlternativeIdentity,
    AlternativeIdType,
    BirthCertificate,
    Citizenship,
    DeathCertificate,
    KraPin,
    NationalId,
    Verification,
)
from domain.value_objects.kenyan_identity import KenyanIdentity, LegalIdentifier, LegalIdType
from domain.value_objects.life_status import LifeState, LifeStatus
from domain.value_objects.personal import (
    AgeCalculation,
    ContactInfo,
    DemographicInfo,
    DisabilityDetail,
    DisabilitySeverity,
    DisabilityStatus,
    DisabilityType,
    Gender,
    KenyanName,
    MaritalStatus,
    Religion,
    normalize_phone,
    years_between,
)

__all__ = [
    "ValueObject",
    "Advisory",
    "DataQualityIssue",
    "project_value",
    # Geography
    "KenyanCounty",
    "CoordinateSource",
    "GPSCoordinates",
    "KenyanLocation",
    # Documents
    "Citizenship",
    "AlternativeIdType",
    "Verification",
    "NationalId",
    "KraPin",
    "BirthCertificate",
    "DeathCertificate",
    "AlternativeIdentity",
    "KenyanIdentity",
    "LegalIdentifier",
    "LegalIdType",
    # Life status
    "LifeState",
    "LifeStatus",
    # Personal
    "Gender",
    "Religion",
    "MaritalStatus",
    "DisabilityType",
    "DisabilitySeverity",
    "KenyanName",
    "ContactInfo",
    "DemographicInfo",
    "AgeCalculation",
    "DisabilityDetail",
    "DisabilityStatus",
    "normalize_phone",
    "years_between",
]
