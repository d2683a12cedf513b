"""
Mirathi - Flat Schemas at the Aggregate Boundary

``FamilyMemberFacts`` is the validating input for creating a member.
``FamilyMemberRecord`` is the flat, nullable shape a member is persisted
in; unknown keys (including derived projection fields) are ignored and
missing legacy fields take documented defaults.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.errors import ValueObjectValidationError


class DisabilityDetailRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    disability_type: str
    severity: str
    description: Optional[str] = None
    onset_date: Optional[date] = None
    requires_assistance: bool = False


class AlternativeIdentityRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    document_type: str
    number: str
    issuing_country: str = "KENYA"
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    is_verified: bool = False
    verified_by: Optional[str] = None
    verification_method: Optional[str] = None
    verified_at: Optional[datetime] = None


class LocationRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    county: Optional[str] = None
    sub_county: Optional[str] = None
    ward: Optional[str] = None
    village: Optional[str] = None
    place_name: Optional[str] = None
    is_urban: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    coordinate_source: Optional[str] = None
    captured_at: Optional[datetime] = None


class FamilyMemberFacts(BaseModel):
    """Facts supplied when a member is first recorded."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    family_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    created_by: Optional[str] = None

    # Name
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    maiden_name: Optional[str] = None

    # Identity
    national_id: Optional[str] = None
    kra_pin: Optional[str] = None
    birth_certificate_entry_number: Optional[str] = None
    birth_registration_date: Optional[date] = None
    birth_registration_district: Optional[str] = None
    place_of_birth: Optional[str] = None
    alternative_identities: List[AlternativeIdentityRecord] = Field(default_factory=list)
    citizenship: str = "KENYAN"
    religion: Optional[str] = None
    ethnicity: Optional[str] = None
    clan: Optional[str] = None
    sub_clan: Optional[str] = None

    # Personal
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    is_urban_dweller: bool = False
    occupation: Optional[str] = None

    # Contact
    phone_number: Optional[str] = None
    secondary_phone: Optional[str] = None
    email: Optional[str] = None
    contact_county: Optional[str] = None
    postal_address: Optional[str] = None

    # Disability
    has_disability: bool = False
    disability_details: List[DisabilityDetailRecord] = Field(default_factory=list)
    registered_with_ncpwd: bool = False
    ncpwd_card_number: Optional[str] = None
    requires_supported_decision_making: bool = False

    # Life status at the time of recording
    is_deceased: bool = False
    date_of_death: Optional[date] = None
    place_of_death: Optional[str] = None
    cause_of_death: Optional[str] = None
    death_certificate_number: Optional[str] = None
    death_registration_date: Optional[date] = None
    death_registration_district: Optional[str] = None
    is_missing: bool = False
    missing_since: Optional[date] = None
    last_seen_location: Optional[str] = None

    birth_location: Optional[LocationRecord] = None
    death_location: Optional[LocationRecord] = None

    @field_validator("gender", "religion", "marital_status", "citizenship", mode="before")
    @classmethod
    def upper_enum_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or None
        return v


class FamilyMemberRecord(BaseModel):
    """
    Persisted flat record. Every field is optional so legacy rows load;
    ``FamilyMember.from_record`` applies the defaults.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    family_id: str
    user_id: Optional[str] = None
    version: int = 0
    created_by: Optional[str] = None

    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    maiden_name: Optional[str] = None

    national_id: Optional[str] = None
    national_id_verified: bool = False
    national_id_verified_by: Optional[str] = None
    national_id_verification_method: Optional[str] = None
    national_id_verified_at: Optional[datetime] = None
    national_id_issue_date: Optional[date] = None
    national_id_issue_place: Optional[str] = None

    kra_pin: Optional[str] = None
    kra_pin_verified: bool = False
    kra_pin_verified_by: Optional[str] = None
    kra_pin_verification_method: Optional[str] = None
    kra_pin_verified_at: Optional[datetime] = None
    is_tax_compliant: bool = False
    kra_pin_registered_on: Optional[date] = None

    birth_certificate_entry_number: Optional[str] = None
    birth_registration_date: Optional[date] = None
    birth_registration_district: Optional[str] = None
    place_of_birth: Optional[str] = None
    birth_certificate_verified: bool = False
    birth_certificate_verified_by: Optional[str] = None
    birth_certificate_verification_method: Optional[str] = None
    birth_certificate_verified_at: Optional[datetime] = None

    death_certificate_number: Optional[str] = None
    death_registration_date: Optional[date] = None
    death_registration_district: Optional[str] = None

    alternative_identities: List[AlternativeIdentityRecord] = Field(default_factory=list)
    citizenship: Optional[str] = None
    religion: Optional[str] = None
    ethnicity: Optional[str] = None
    clan: Optional[str] = None
    sub_clan: Optional[str] = None

    life_state: Optional[str] = None
    is_deceased: Optional[bool] = None
    date_of_death: Optional[date] = None
    place_of_death: Optional[str] = None
    cause_of_death: Optional[str] = None
    missing_since: Optional[date] = None
    last_seen_location: Optional[str] = None

    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    is_urban_dweller: bool = False
    occupation: Optional[str] = None

    phone_number: Optional[str] = None
    secondary_phone: Optional[str] = None
    email: Optional[str] = None
    contact_county: Optional[str] = None
    postal_address: Optional[str] = None

    has_disability: Optional[bool] = None
    disability_status: Optional[str] = None
    disability_details: List[DisabilityDetailRecord] = Field(default_factory=list)
    registered_with_ncpwd: bool = False
    ncpwd_card_number: Optional[str] = None
    requires_supported_decision_making: bool = False

    birth_location: Optional[LocationRecord] = None
    death_location: Optional[LocationRecord] = None

    polygamous_house_id: Optional[str] = None
    house_order: Optional[int] = None

    is_archived: bool = False
    archived_at: Optional[datetime] = None
    archived_by: Optional[str] = None
    archive_reason: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("languages", "alternative_identities", "disability_details", mode="before")
    @classmethod
    def null_list(cls, v: Any) -> Any:
        return [] if v is None else v


def parse_model(model: type, data: Any, value_object: str) -> Any:
    """Validate ``data`` into ``model``; pydantic failures become ``ValueObjectValidationError``."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(str(part) for part in first.get("loc", ()))
        raise ValueObjectValidationError(
            f"Invalid {value_object}: {first.get('msg')}",
            field_name=field_name or None,
            value_object=value_object,
            details={"errors": [err.get("msg") for err in e.errors()]},
            cause=e,
        ) from e


def location_to_record(location: Any) -> Optional[Dict[str, Any]]:
    if location is None:
        return None
    coords = location.coordinates
    return {
        "county": location.county.value,
        "sub_county": location.sub_county,
        "ward": location.ward,
        "village": location.village,
        "place_name": location.place_name,
        "is_urban": location.is_urban,
        "latitude": coords.latitude if coords else None,
        "longitude": coords.longitude if coords else None,
        "altitude": coords.altitude if coords else None,
        "accuracy": coords.accuracy if coords else None,
        "coordinate_source": coords.source.value if coords else None,
        "captured_at": coords.captured_at.isoformat() if coords and coords.captured_at else None,
    }
