"""
Mirathi - FamilyMember Aggregate Root

A person in a family tree together with the facts succession law cares
about: identity documents, life status, age, disability and polygamous
house membership.

Every mutation runs in the same order:

    guards -> validation -> state change -> version +1 -> events

Value objects are built before any field is assigned, so a failure
raises with the aggregate untouched.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union
from uuid import uuid4

from core.clock import SYSTEM_CLOCK, Clock
from core.errors import MirathiError, ValueObjectValidationError
from domain.entities import AggregateRoot
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
from domain.policies.base import Verdict
from domain.policies.dependency import DependencyAssessment, DependencyLevel, assess_dependency
from domain.policies.inheritance import InheritanceContext, InheritanceEligibilityPolicy
from domain.policies.polygamy import S40_CITATION, HouseAssignmentContext, PolygamousHouseAssignmentPolicy
from domain.records import (
    AlternativeIdentityRecord,
    FamilyMemberFacts,
    FamilyMemberRecord,
    LocationRecord,
    location_to_record,
    parse_model,
)
from domain.value_objects.base import Advisory, ValueObject, project_value
from domain.value_objects.geographic import CoordinateSource, GPSCoordinates, KenyanCounty, KenyanLocation
from domain.value_objects.identity import (
    AlternativeIdentity,
    BirthCertificate,
    Citizenship,
    DeathCertificate,
    KraPin,
    NationalId,
    Verification,
)
from domain.value_objects.kenyan_identity import KenyanIdentity
from domain.value_objects.life_status import LifeState, LifeStatus
from domain.value_objects.personal import (
    AgeCalculation,
    ContactInfo,
    DemographicInfo,
    DisabilityDetail,
    DisabilityStatus,
    Gender,
    KenyanName,
)

T = TypeVar("T")

SYSTEM_ACTOR = "system"
DECEASED_ARCHIVE_REASON = "DECEASED"
LEGACY_ACTOR = "LEGACY_IMPORT"
LEGACY_METHOD = "LEGACY_RECORD"
PERSONAL_LAW_CITATION = "Law of Succession Act (Cap 160), s. 2(3)"

# Projection keys recomputed from state; a record never needs to carry them.
DERIVED_ONLY_FIELDS: FrozenSet[str] = frozenset({
    "full_name",
    "current_age",
    "is_minor",
    "is_student_age",
    "is_alive",
    "is_deceased",
    "is_missing",
    "is_active",
    "legally_verified",
    "customary_law_applicable",
    "primary_legal_id_type",
    "primary_legal_id_value",
    "is_potential_dependant",
    "dependency_level",
    "dependency_basis",
    "is_eligible_for_inheritance",
    "is_eligible_for_presumption_of_death",
    "advisories",
})


def _pick(new: Optional[T], current: Optional[T]) -> Optional[T]:
    """``None`` means "leave unchanged"."""
    return current if new is None else new


def _iso(value: Optional[Union[date, datetime]]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _diff(before: Mapping[str, Any], after: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    return {
        key: {"old": before.get(key), "new": value}
        for key, value in after.items()
        if before.get(key) != value
    }


def _date_conflict(
    date_of_birth: Optional[date],
    identity: KenyanIdentity,
    life_status: LifeStatus,
) -> Optional[Tuple[str, str]]:
    """``(field, message)`` when birth and death dates disagree, else ``None``."""
    certificate = identity.birth_certificate
    if date_of_birth is not None and certificate is not None and certificate.date_of_birth != date_of_birth:
        return "date_of_birth", "Date of birth differs from the birth certificate"
    date_of_death = life_status.date_of_death
    if date_of_birth is not None and date_of_death is not None and date_of_death < date_of_birth:
        return "date_of_death", "Date of death precedes date of birth"
    return None


def _dependency_event(assessment: DependencyAssessment) -> DependencyAssessed:
    return DependencyAssessed(
        is_potential_dependant=assessment.is_potential_dependant,
        dependency_level=assessment.level.value,
        basis=assessment.basis,
        legal_citation=assessment.legal_citation,
    )


# =============================================================================
# FLAT <-> VALUE OBJECT HELPERS
# =============================================================================


def _verification_fields(prefix: str, verification: Optional[Verification]) -> Dict[str, Any]:
    v = verification or Verification.unverified()
    return {
        f"{prefix}_verified": v.is_verified,
        f"{prefix}_verified_by": v.verified_by,
        f"{prefix}_verification_method": v.method,
        f"{prefix}_verified_at": _iso(v.verified_at),
    }


def _verification_from(
    is_verified: bool,
    verified_by: Optional[str],
    method: Optional[str],
    verified_at: Optional[datetime],
    fallback_at: datetime,
) -> Verification:
    # Legacy rows may carry the flag without the details.
    if not is_verified:
        return Verification.unverified()
    return Verification.verified(verified_by or LEGACY_ACTOR, method or LEGACY_METHOD, verified_at or fallback_at)


def _alternative_from(record: AlternativeIdentityRecord, fallback_at: datetime) -> AlternativeIdentity:
    return AlternativeIdentity(
        document_type=record.document_type,
        number=record.number,
        issuing_country=record.issuing_country,
        issue_date=record.issue_date,
        expiry_date=record.expiry_date,
        verification=_verification_from(
            record.is_verified,
            record.verified_by,
            record.verification_method,
            record.verified_at,
            fallback_at,
        ),
    )


def _alternative_to_record(alt: AlternativeIdentity) -> Dict[str, Any]:
    v = alt.verification
    return {
        "document_type": alt.document_type.value,
        "number": alt.number,
        "issuing_country": alt.issuing_country,
        "issue_date": _iso(alt.issue_date),
        "expiry_date": _iso(alt.expiry_date),
        "is_verified": v.is_verified,
        "verified_by": v.verified_by,
        "verification_method": v.method,
        "verified_at": _iso(v.verified_at),
    }


def _location_from(record: Optional[LocationRecord]) -> Optional[KenyanLocation]:
    if record is None:
        return None
    coordinates = None
    if record.latitude is not None and record.longitude is not None:
        coordinates = GPSCoordinates(
            latitude=record.latitude,
            longitude=record.longitude,
            altitude=record.altitude,
            accuracy=record.accuracy,
            source=record.coordinate_source or CoordinateSource.UNKNOWN,
            captured_at=record.captured_at,
        )
    return KenyanLocation(
        county=KenyanCounty.parse(record.county),
        sub_county=record.sub_county,
        ward=record.ward,
        village=record.village,
        place_name=record.place_name,
        coordinates=coordinates,
        is_urban=record.is_urban,
    )


def _birth_certificate(
    entry_number: Optional[str],
    date_of_birth: Optional[date],
    registration_date: Optional[date],
    registration_district: Optional[str],
    place_of_birth: Optional[str],
    verification: Verification,
    as_of: date,
) -> Optional[BirthCertificate]:
    if not entry_number:
        return None
    if date_of_birth is None:
        raise ValueObjectValidationError(
            "Birth certificate requires a date of birth",
            field_name="date_of_birth",
            value_object="BirthCertificate",
        )
    return BirthCertificate(
        entry_number=entry_number,
        date_of_birth=date_of_birth,
        registration_date=registration_date,
        place_of_birth=place_of_birth,
        registration_district=registration_district,
        verification=verification,
        as_of=as_of,
    )


def _death_certificate(
    certificate_number: Optional[str],
    life_status: LifeStatus,
    registration_date: Optional[date],
    registration_district: Optional[str],
    as_of: date,
) -> Optional[DeathCertificate]:
    if not certificate_number or life_status.date_of_death is None:
        return None
    return DeathCertificate(
        certificate_number=certificate_number,
        date_of_death=life_status.date_of_death,
        registration_date=registration_date,
        place_of_death=life_status.place_of_death,
        registration_district=registration_district,
        cause_of_death=life_status.cause_of_death,
        as_of=as_of,
    )


def _contact_from(
    phone_number: Optional[str],
    secondary_phone: Optional[str],
    email: Optional[str],
    county: Optional[str],
    postal_address: Optional[str],
) -> Optional[ContactInfo]:
    if not any((phone_number, secondary_phone, email, county, postal_address)):
        return None
    return ContactInfo(
        phone_number=phone_number,
        secondary_phone=secondary_phone,
        email=email,
        county=county,
        postal_address=postal_address,
    )


def _initial_life_status(facts: FamilyMemberFacts, today: date) -> LifeStatus:
    if facts.is_deceased or facts.date_of_death is not None:
        state = LifeState.DECEASED
    elif facts.is_missing or facts.missing_since is not None:
        state = LifeState.MISSING
    else:
        state = LifeState.ALIVE

    for name in ("date_of_death", "missing_since"):
        value = getattr(facts, name)
        if value is not None and value > today:
            raise ValueObjectValidationError(
                f"{name} cannot be in the future",
                field_name=name,
                value_object="LifeStatus",
                details={"value": value.isoformat(), "today": today.isoformat()},
            )

    return LifeStatus(
        state=state,
        date_of_death=facts.date_of_death,
        place_of_death=facts.place_of_death,
        cause_of_death=facts.cause_of_death,
        death_certificate_number=facts.death_certificate_number,
        missing_since=facts.missing_since,
        last_seen_location=facts.last_seen_location,
    )


def _legacy_life_state(record: FamilyMemberRecord) -> Union[str, LifeState]:
    if record.life_state:
        return record.life_state
    if record.is_deceased or record.date_of_death is not None:
        return LifeState.DECEASED
    if record.missing_since is not None:
        return LifeState.MISSING
    return LifeState.ALIVE


def _disability_from(
    has_disability: bool,
    details: Iterable[Any],
    registered_with_ncpwd: bool,
    ncpwd_card_number: Optional[str],
    requires_supported_decision_making: bool,
) -> DisabilityStatus:
    return DisabilityStatus(
        has_disability=has_disability,
        details=tuple(DisabilityDetail(**d.model_dump()) for d in details),
        registered_with_ncpwd=registered_with_ncpwd,
        ncpwd_card_number=ncpwd_card_number,
        requires_supported_decision_making=requires_supported_decision_making,
    )


# =============================================================================
# AGGREGATE
# =============================================================================


class FamilyMember(AggregateRoot):
    """
    Aggregate root for a family member.

    Use ``create`` for a new member and ``from_record`` to rehydrate a
    stored one; the constructor itself emits no events. Demographic
    ethnicity and clan mirror the identity's cultural details.
    """

    def __init__(
        self,
        member_id: str,
        family_id: str,
        name: KenyanName,
        identity: Optional[KenyanIdentity] = None,
        life_status: Optional[LifeStatus] = None,
        *,
        user_id: Optional[str] = None,
        contact: Optional[ContactInfo] = None,
        demographics: Optional[DemographicInfo] = None,
        date_of_birth: Optional[date] = None,
        disability_status: Optional[DisabilityStatus] = None,
        birth_location: Optional[KenyanLocation] = None,
        death_location: Optional[KenyanLocation] = None,
        occupation: Optional[str] = None,
        polygamous_house_id: Optional[str] = None,
        house_order: Optional[int] = None,
        is_archived: bool = False,
        archived_at: Optional[datetime] = None,
        archived_by: Optional[str] = None,
        archive_reason: Optional[str] = None,
        created_by: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        version: int = 0,
        clock: Optional[Clock] = None,
    ) -> None:
        for field_name, value in (("id", member_id), ("family_id", family_id)):
            if not value or not str(value).strip():
                raise ValueObjectValidationError(
                    f"{field_name} is required", field_name=field_name, value_object="FamilyMember"
                )

        self._id = member_id
        super().__init__(clock)

        self._family_id = family_id
        self._user_id = user_id
        self._name = name
        self._identity = identity or KenyanIdentity()
        self._life_status = life_status or LifeStatus.alive()
        self._contact = contact
        self._demographics = demographics or DemographicInfo()
        self._disability_status = disability_status or DisabilityStatus.none()
        self._birth_location = birth_location
        self._death_location = death_location
        self._occupation = occupation
        self._polygamous_house_id = polygamous_house_id
        self._house_order = house_order
        self._is_archived = is_archived
        self._archived_at = archived_at
        self._archived_by = archived_by
        self._archive_reason = archive_reason
        self._created_by = created_by

        certificate = self._identity.birth_certificate
        self._date_of_birth = date_of_birth or (certificate.date_of_birth if certificate else None)

        conflict = _date_conflict(self._date_of_birth, self._identity, self._life_status)
        if conflict is not None:
            raise ValueObjectValidationError(conflict[1], field_name=conflict[0], value_object="FamilyMember")
        if death_location is not None and not self._life_status.is_deceased:
            raise ValueObjectValidationError(
                "Death location recorded for a member who is not deceased",
                field_name="death_location",
                value_object="FamilyMember",
            )

        now = self._clock.now()
        self._created_at = created_at or now
        self._updated_at = updated_at or self._created_at
        self._version = version

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @classmethod
    def create(
        cls,
        facts: Union[FamilyMemberFacts, Mapping[str, Any]],
        clock: Optional[Clock] = None,
        member_id: Optional[str] = None,
    ) -> "FamilyMember":
        """
        Record a new member from flat facts.

        Raises:
            ValueObjectValidationError: if any fact is invalid
        """
        facts = parse_model(FamilyMemberFacts, facts, "FamilyMemberFacts")
        clock = clock or SYSTEM_CLOCK
        today = clock.today()
        now = clock.now()

        name = KenyanName(
            first_name=facts.first_name,
            last_name=facts.last_name,
            middle_name=facts.middle_name,
            maiden_name=facts.maiden_name,
        )
        life_status = _initial_life_status(facts, today)
        if facts.date_of_birth is not None:
            AgeCalculation(facts.date_of_birth, life_status.date_of_death or today)

        death_certificate = _death_certificate(
            facts.death_certificate_number,
            life_status,
            facts.death_registration_date,
            facts.death_registration_district,
            today,
        )
        identity = KenyanIdentity(
            national_id=NationalId(facts.national_id, as_of=today) if facts.national_id else None,
            kra_pin=KraPin(facts.kra_pin, as_of=today) if facts.kra_pin else None,
            birth_certificate=_birth_certificate(
                facts.birth_certificate_entry_number,
                facts.date_of_birth,
                facts.birth_registration_date,
                facts.birth_registration_district,
                facts.place_of_birth,
                Verification.unverified(),
                today,
            ),
            death_certificate=death_certificate,
            alternative_identities=tuple(_alternative_from(a, now) for a in facts.alternative_identities),
            citizenship=facts.citizenship,
            religion=facts.religion,
            ethnicity=facts.ethnicity,
            clan=facts.clan,
            sub_clan=facts.sub_clan,
        )
        if death_certificate is not None:
            life_status = LifeStatus(
                state=LifeState.DECEASED,
                date_of_death=life_status.date_of_death,
                place_of_death=life_status.place_of_death,
                cause_of_death=life_status.cause_of_death,
                death_certificate_number=death_certificate.certificate_number,
            )

        demographics = DemographicInfo(
            gender=facts.gender,
            religion=identity.religion,
            marital_status=facts.marital_status,
            ethnic_group=identity.ethnicity,
            sub_ethnic_group=identity.clan,
            languages=tuple(facts.languages),
            is_urban_dweller=facts.is_urban_dweller,
        )
        disability = _disability_from(
            facts.has_disability,
            facts.disability_details,
            facts.registered_with_ncpwd,
            facts.ncpwd_card_number,
            facts.requires_supported_decision_making,
        )

        deceased = life_status.is_deceased
        actor = facts.created_by or SYSTEM_ACTOR
        member = cls(
            member_id or str(uuid4()),
            facts.family_id,
            name,
            identity,
            life_status,
            user_id=facts.user_id,
            contact=_contact_from(
                facts.phone_number,
                facts.secondary_phone,
                facts.email,
                facts.contact_county,
                facts.postal_address,
            ),
            demographics=demographics,
            date_of_birth=facts.date_of_birth,
            disability_status=disability,
            birth_location=_location_from(facts.birth_location),
            death_location=_location_from(facts.death_location),
            occupation=facts.occupation,
            is_archived=deceased,
            archived_at=now if deceased else None,
            archived_by=actor if deceased else None,
            archive_reason=DECEASED_ARCHIVE_REASON if deceased else None,
            created_by=facts.created_by,
            created_at=now,
            updated_at=now,
            clock=clock,
        )

        events = (
            FamilyMemberCreated(
                family_id=member.family_id,
                full_name=member.full_name,
                is_deceased=member.is_deceased,
                is_minor=member.is_minor,
                created_by=facts.created_by,
            ),
            _dependency_event(member.dependency_assessment),
        )
        member._commit("create", *events)
        member._log.created(member.id, [e.event_type for e in events], family_id=member.family_id)
        return member

    @classmethod
    def try_create(
        cls,
        facts: Union[FamilyMemberFacts, Mapping[str, Any]],
        clock: Optional[Clock] = None,
        member_id: Optional[str] = None,
    ) -> Tuple[Optional["FamilyMember"], Optional[MirathiError]]:
        """``(member, None)`` on success, ``(None, error)`` on a validation failure."""
        try:
            return cls.create(facts, clock=clock, member_id=member_id), None
        except MirathiError as e:
            return None, e

    @classmethod
    def from_record(
        cls,
        record: Union[FamilyMemberRecord, Mapping[str, Any]],
        clock: Optional[Clock] = None,
    ) -> "FamilyMember":
        """
        Rehydrate a member from its flat record.

        Legacy defaults: citizenship KENYAN, unknown counties UNKNOWN,
        documents without verification details unverified (or stamped
        ``LEGACY_IMPORT`` when only the flag survives), version 0, and a
        deceased row that was never archived comes back archived.
        """
        rec = parse_model(FamilyMemberRecord, record, "FamilyMemberRecord")
        clock = clock or SYSTEM_CLOCK
        fallback_at = rec.created_at or clock.now()
        today = clock.today()

        life_status = LifeStatus(
            state=_legacy_life_state(rec),
            date_of_death=rec.date_of_death,
            place_of_death=rec.place_of_death,
            cause_of_death=rec.cause_of_death,
            death_certificate_number=rec.death_certificate_number,
            missing_since=rec.missing_since,
            last_seen_location=rec.last_seen_location,
        )

        national_id = None
        if rec.national_id:
            national_id = NationalId(
                rec.national_id,
                verification=_verification_from(
                    rec.national_id_verified,
                    rec.national_id_verified_by,
                    rec.national_id_verification_method,
                    rec.national_id_verified_at,
                    fallback_at,
                ),
                issue_date=rec.national_id_issue_date,
                issue_place=rec.national_id_issue_place,
                as_of=today,
            )
        kra_pin = None
        if rec.kra_pin:
            kra_pin = KraPin(
                rec.kra_pin,
                verification=_verification_from(
                    rec.kra_pin_verified,
                    rec.kra_pin_verified_by,
                    rec.kra_pin_verification_method,
                    rec.kra_pin_verified_at,
                    fallback_at,
                ),
                is_tax_compliant=rec.is_tax_compliant and rec.kra_pin_verified,
                registered_on=rec.kra_pin_registered_on,
                as_of=today,
            )

        identity = KenyanIdentity(
            national_id=national_id,
            kra_pin=kra_pin,
            birth_certificate=_birth_certificate(
                rec.birth_certificate_entry_number,
                rec.date_of_birth,
                rec.birth_registration_date,
                rec.birth_registration_district,
                rec.place_of_birth,
                _verification_from(
                    rec.birth_certificate_verified,
                    rec.birth_certificate_verified_by,
                    rec.birth_certificate_verification_method,
                    rec.birth_certificate_verified_at,
                    fallback_at,
                ),
                today,
            ),
            death_certificate=_death_certificate(
                rec.death_certificate_number,
                life_status,
                rec.death_registration_date,
                rec.death_registration_district,
                today,
            ),
            alternative_identities=tuple(_alternative_from(a, fallback_at) for a in rec.alternative_identities),
            citizenship=rec.citizenship or Citizenship.KENYAN,
            religion=rec.religion,
            ethnicity=rec.ethnicity,
            clan=rec.clan,
            sub_clan=rec.sub_clan,
        )

        has_disability = rec.has_disability
        if has_disability is None:
            # Older rows stored a single disability type string, "NONE" when absent.
            legacy = (rec.disability_status or "NONE").strip().upper()
            has_disability = legacy != "NONE" or bool(rec.disability_details)

        is_archived = rec.is_archived
        archived_at, archived_by, archive_reason = rec.archived_at, rec.archived_by, rec.archive_reason
        if life_status.is_deceased and not is_archived:
            is_archived = True
            archived_at = rec.updated_at or fallback_at
            archived_by = LEGACY_ACTOR
            archive_reason = DECEASED_ARCHIVE_REASON

        return cls(
            rec.id,
            rec.family_id,
            KenyanName(
                first_name=rec.first_name,
                last_name=rec.last_name,
                middle_name=rec.middle_name,
                maiden_name=rec.maiden_name,
            ),
            identity,
            life_status,
            user_id=rec.user_id,
            contact=_contact_from(
                rec.phone_number,
                rec.secondary_phone,
                rec.email,
                rec.contact_county,
                rec.postal_address,
            ),
            demographics=DemographicInfo(
                gender=rec.gender,
                religion=identity.religion,
                marital_status=rec.marital_status,
                ethnic_group=identity.ethnicity,
                sub_ethnic_group=identity.clan,
                languages=tuple(rec.languages),
                is_urban_dweller=rec.is_urban_dweller,
            ),
            date_of_birth=rec.date_of_birth,
            disability_status=_disability_from(
                has_disability,
                rec.disability_details,
                rec.registered_with_ncpwd,
                rec.ncpwd_card_number,
                rec.requires_supported_decision_making,
            ),
            birth_location=_location_from(rec.birth_location),
            death_location=_location_from(rec.death_location),
            occupation=rec.occupation,
            polygamous_house_id=rec.polygamous_house_id,
            house_order=rec.house_order,
            is_archived=is_archived,
            archived_at=archived_at,
            archived_by=archived_by,
            archive_reason=archive_reason,
            created_by=rec.created_by,
            created_at=rec.created_at,
            updated_at=rec.updated_at,
            version=rec.version,
            clock=clock,
        )

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def id(self) -> str:
        return self._id

    @property
    def family_id(self) -> str:
        return self._family_id

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def name(self) -> KenyanName:
        return self._name

    @property
    def full_name(self) -> str:
        return self._name.full_name

    @property
    def identity(self) -> KenyanIdentity:
        return self._identity

    @property
    def life_status(self) -> LifeStatus:
        return self._life_status

    @property
    def contact(self) -> Optional[ContactInfo]:
        return self._contact

    @property
    def demographics(self) -> DemographicInfo:
        return self._demographics

    @property
    def gender(self) -> Optional[Gender]:
        return self._demographics.gender

    @property
    def date_of_birth(self) -> Optional[date]:
        return self._date_of_birth

    @property
    def disability_status(self) -> DisabilityStatus:
        return self._disability_status

    @property
    def birth_location(self) -> Optional[KenyanLocation]:
        return self._birth_location

    @property
    def death_location(self) -> Optional[KenyanLocation]:
        return self._death_location

    @property
    def occupation(self) -> Optional[str]:
        return self._occupation

    @property
    def polygamous_house_id(self) -> Optional[str]:
        return self._polygamous_house_id

    @property
    def house_order(self) -> Optional[int]:
        return self._house_order

    @property
    def is_archived(self) -> bool:
        return self._is_archived

    @property
    def archived_at(self) -> Optional[datetime]:
        return self._archived_at

    @property
    def archived_by(self) -> Optional[str]:
        return self._archived_by

    @property
    def archive_reason(self) -> Optional[str]:
        return self._archive_reason

    @property
    def created_by(self) -> Optional[str]:
        return self._created_by

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    # =========================================================================
    # COMPUTED
    # =========================================================================

    @property
    def is_alive(self) -> bool:
        return self._life_status.is_alive

    @property
    def is_deceased(self) -> bool:
        return self._life_status.is_deceased

    @property
    def is_missing(self) -> bool:
        return self._life_status.is_missing

    @property
    def is_active(self) -> bool:
        """Alive and not archived; a missing member is inactive until found."""
        return self._life_status.is_alive and not self._is_archived

    @property
    def age_calculation(self) -> Optional[AgeCalculation]:
        """Age as of today, or as of the date of death for a deceased member."""
        if self._date_of_birth is None:
            return None
        if self.is_deceased and self._life_status.date_of_death is None:
            return None
        reference = self._life_status.date_of_death or self._clock.today()
        return AgeCalculation(self._date_of_birth, reference)

    @property
    def current_age(self) -> Optional[int]:
        age = self.age_calculation
        return age.age if age is not None else None

    @property
    def is_minor(self) -> bool:
        age = self.age_calculation
        return not self.is_deceased and age is not None and age.is_minor

    @property
    def is_student_age(self) -> bool:
        age = self.age_calculation
        return not self.is_deceased and age is not None and age.is_young_adult

    @property
    def dependency_assessment(self) -> DependencyAssessment:
        return assess_dependency(self)

    @property
    def is_potential_dependant(self) -> bool:
        return self.dependency_assessment.is_potential_dependant

    @property
    def dependency_level(self) -> DependencyLevel:
        return self.dependency_assessment.level

    @property
    def is_eligible_for_inheritance(self) -> bool:
        return (
            not self.is_deceased
            and self._identity.legally_verified
            and not self._life_status.is_missing
            and not self._is_archived
        )

    @property
    def is_eligible_for_presumption_of_death(self) -> bool:
        return self._life_status.is_eligible_for_presumption_of_death(self._clock.today())

    def inheritance_verdict(self, today: Optional[date] = None) -> Verdict:
        """Full statutory reasoning behind ``is_eligible_for_inheritance``."""
        return InheritanceEligibilityPolicy().evaluate(InheritanceContext(self, today))

    @property
    def advisories(self) -> Tuple[Advisory, ...]:
        collected: List[Advisory] = []
        for vo in self._value_objects():
            collected.extend(vo.advisories)
        return tuple(collected)

    def _value_objects(self) -> List[ValueObject]:
        ident = self._identity
        candidates: List[Optional[ValueObject]] = [
            self._name,
            ident,
            ident.national_id,
            ident.kra_pin,
            ident.birth_certificate,
            ident.death_certificate,
            *ident.alternative_identities,
            self._life_status,
            self._contact,
            self._demographics,
            self._disability_status,
        ]
        for location in (self._birth_location, self._death_location):
            if location is not None:
                candidates.extend((location, location.coordinates))
        return [vo for vo in candidates if vo is not None]

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def _commit(self, operation: str, *events: DomainEvent) -> None:
        self._updated_at = self._clock.now()
        super()._commit(operation, *events)

    def _ensure_active(self, operation: str) -> None:
        self._guard(
            not self._is_archived,
            operation,
            "archived_member_is_read_only",
            "Archived member cannot be modified",
        )

    @staticmethod
    def _personal_view(
        name: KenyanName,
        demographics: DemographicInfo,
        identity: KenyanIdentity,
        date_of_birth: Optional[date],
        occupation: Optional[str],
    ) -> Dict[str, Any]:
        return {
            "first_name": name.first_name,
            "middle_name": name.middle_name,
            "last_name": name.last_name,
            "maiden_name": name.maiden_name,
            "date_of_birth": _iso(date_of_birth),
            "gender": project_value(demographics.gender),
            "religion": project_value(identity.religion),
            "marital_status": project_value(demographics.marital_status),
            "ethnicity": identity.ethnicity,
            "clan": identity.clan,
            "sub_clan": identity.sub_clan,
            "languages": list(demographics.languages),
            "is_urban_dweller": demographics.is_urban_dweller,
            "occupation": occupation,
            "citizenship": identity.citizenship.value,
        }

    @staticmethod
    def _contact_view(contact: Optional[ContactInfo]) -> Dict[str, Any]:
        if contact is None:
            return dict.fromkeys(
                ("phone_number", "secondary_phone", "email", "contact_county", "postal_address")
            )
        return {
            "phone_number": contact.phone_number,
            "secondary_phone": contact.secondary_phone,
            "email": contact.email,
            "contact_county": project_value(contact.county),
            "postal_address": contact.postal_address,
        }

    def update_personal_info(
        self,
        *,
        first_name: Optional[str] = None,
        middle_name: Optional[str] = None,
        last_name: Optional[str] = None,
        maiden_name: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        gender: Optional[Union[Gender, str]] = None,
        religion: Optional[str] = None,
        marital_status: Optional[str] = None,
        ethnicity: Optional[str] = None,
        clan: Optional[str] = None,
        sub_clan: Optional[str] = None,
        languages: Optional[Iterable[str]] = None,
        is_urban_dweller: Optional[bool] = None,
        occupation: Optional[str] = None,
        citizenship: Optional[Union[Citizenship, str]] = None,
        updated_by: Optional[str] = None,
    ) -> None:
        """
        Partial update of personal details; ``None`` leaves a field as is.

        Emits ``FamilyMemberUpdated`` with the changed fields, plus
        ``AgeRecalculated`` when the date of birth moves, ``DependencyAssessed``
        when the dependency outcome changes and ``StatutoryStatusChanged``
        when the applicable personal law changes.
        """
        operation = "update_personal_info"
        self._ensure_active(operation)

        n, d, i = self._name, self._demographics, self._identity
        name = KenyanName(
            first_name=_pick(first_name, n.first_name),
            last_name=_pick(last_name, n.last_name),
            middle_name=_pick(middle_name, n.middle_name),
            maiden_name=_pick(maiden_name, n.maiden_name),
        )
        identity = i.with_cultural_details(
            religion=_pick(religion, i.religion),
            ethnicity=_pick(ethnicity, i.ethnicity),
            clan=_pick(clan, i.clan),
            sub_clan=_pick(sub_clan, i.sub_clan),
        )
        if citizenship is not None:
            identity = identity.with_citizenship(citizenship)
        demographics = DemographicInfo(
            gender=_pick(gender, d.gender),
            religion=identity.religion,
            marital_status=_pick(marital_status, d.marital_status),
            ethnic_group=identity.ethnicity,
            sub_ethnic_group=identity.clan,
            languages=tuple(languages) if languages is not None else d.languages,
            is_urban_dweller=_pick(is_urban_dweller, d.is_urban_dweller),
        )
        new_date_of_birth = _pick(date_of_birth, self._date_of_birth)
        if new_date_of_birth is not None:
            AgeCalculation(new_date_of_birth, self._clock.today())
        conflict = _date_conflict(new_date_of_birth, identity, self._life_status)
        if conflict is not None:
            self._guard(False, operation, "birth_dates_consistent", conflict[1])
        new_occupation = _pick(occupation, self._occupation)

        changes = _diff(
            self._personal_view(self._name, self._demographics, self._identity, self._date_of_birth, self._occupation),
            self._personal_view(name, demographics, identity, new_date_of_birth, new_occupation),
        )
        self._guard(bool(changes), operation, "update_changes_state", "No personal details changed")

        previous_age = self.current_age
        previous_assessment = self.dependency_assessment
        previous_customary = self._identity.customary_law_applicable

        self._name = name
        self._identity = identity
        self._demographics = demographics
        self._date_of_birth = new_date_of_birth
        self._occupation = new_occupation

        events: List[DomainEvent] = [FamilyMemberUpdated(changes=changes, updated_by=updated_by)]
        if "date_of_birth" in changes:
            events.append(
                AgeRecalculated(
                    previous_age=previous_age,
                    new_age=self.current_age,
                    reason="DATE_OF_BIRTH_CORRECTED",
                )
            )
        assessment = self.dependency_assessment
        if assessment != previous_assessment:
            events.append(_dependency_event(assessment))
        if identity.customary_law_applicable != previous_customary:
            events.append(
                StatutoryStatusChanged(
                    status="CUSTOMARY_LAW_APPLICABLE" if identity.customary_law_applicable else "CUSTOMARY_LAW_EXEMPT",
                    legal_citation=PERSONAL_LAW_CITATION,
                    details={"religion": project_value(identity.religion), "ethnicity": identity.ethnicity},
                )
            )
        self._commit(operation, *events)

    def update_contact_info(
        self,
        *,
        phone_number: Optional[str] = None,
        secondary_phone: Optional[str] = None,
        email: Optional[str] = None,
        county: Optional[Union[KenyanCounty, str]] = None,
        postal_address: Optional[str] = None,
        updated_by: Optional[str] = None,
    ) -> None:
        operation = "update_contact_info"
        self._ensure_active(operation)

        current = self._contact
        contact = ContactInfo(
            phone_number=_pick(phone_number, current.phone_number if current else None),
            secondary_phone=_pick(secondary_phone, current.secondary_phone if current else None),
            email=_pick(email, current.email if current else None),
            county=_pick(county, current.county if current else None),
            postal_address=_pick(postal_address, current.postal_address if current else None),
        )
        changes = _diff(self._contact_view(current), self._contact_view(contact))
        self._guard(bool(changes), operation, "update_changes_state", "No contact details changed")

        self._contact = contact
        self._commit(operation, FamilyMemberUpdated(changes=changes, updated_by=updated_by))

    def mark_as_deceased(
        self,
        date_of_death: date,
        *,
        place_of_death: Optional[str] = None,
        cause_of_death: Optional[str] = None,
        death_certificate_number: Optional[str] = None,
        registration_date: Optional[date] = None,
        registration_district: Optional[str] = None,
        death_location: Optional[KenyanLocation] = None,
        recorded_by: str = SYSTEM_ACTOR,
    ) -> None:
        """
        Record a death. The member is archived in the same mutation.

        Emits ``FamilyMemberDeceased``, ``AgeRecalculated`` and
        ``FamilyMemberArchived``. Without a certificate number the life
        status carries a ``MISSING_DEATH_CERTIFICATE`` advisory.
        """
        operation = "mark_as_deceased"
        self._guard(not self.is_deceased, operation, "deceased_is_terminal", "Member is already deceased")
        self._ensure_active(operation)
        today = self._clock.today()
        self._guard(
            date_of_death <= today, operation, "death_not_in_future", "Date of death cannot be in the future"
        )
        if self._date_of_birth is not None:
            self._guard(
                date_of_death >= self._date_of_birth,
                operation,
                "birth_dates_consistent",
                "Date of death precedes date of birth",
            )

        certificate = None
        if death_certificate_number:
            certificate = DeathCertificate(
                certificate_number=death_certificate_number,
                date_of_death=date_of_death,
                registration_date=registration_date,
                place_of_death=place_of_death,
                registration_district=registration_district,
                cause_of_death=cause_of_death,
                as_of=today,
            )
        life_status = self._life_status.mark_deceased(
            date_of_death,
            today,
            place_of_death=place_of_death,
            cause_of_death=cause_of_death,
            death_certificate_number=certificate.certificate_number if certificate else None,
        )
        identity = self._identity.with_death_certificate(certificate) if certificate else self._identity

        previous_age = self.current_age
        now = self._clock.now()

        self._life_status = life_status
        self._identity = identity
        self._death_location = death_location
        self._is_archived = True
        self._archived_at = now
        self._archived_by = recorded_by
        self._archive_reason = DECEASED_ARCHIVE_REASON

        age_at_death = self.current_age
        self._commit(
            operation,
            FamilyMemberDeceased(
                date_of_death=date_of_death.isoformat(),
                place_of_death=place_of_death,
                cause_of_death=cause_of_death,
                death_certificate_number=life_status.death_certificate_number,
                age_at_death=age_at_death,
            ),
            AgeRecalculated(previous_age=previous_age, new_age=age_at_death, reason="DECEASED"),
            FamilyMemberArchived(reason=DECEASED_ARCHIVE_REASON, archived_by=recorded_by),
        )

    def mark_as_missing(
        self,
        missing_since: date,
        *,
        last_seen_location: Optional[str] = None,
        reported_by: Optional[str] = None,
    ) -> None:
        operation = "mark_as_missing"
        self._ensure_active(operation)
        self._guard(
            self._life_status.is_alive,
            operation,
            "missing_requires_alive",
            f"Cannot mark a {self._life_status.state.value.lower()} member as missing",
        )
        if self._date_of_birth is not None:
            self._guard(
                missing_since >= self._date_of_birth,
                operation,
                "birth_dates_consistent",
                "Missing-since date precedes date of birth",
            )

        life_status = self._life_status.mark_missing(missing_since, self._clock.today(), last_seen_location)

        self._life_status = life_status
        self._commit(
            operation,
            MissingStatusChanged(
                is_missing=True,
                missing_since=missing_since.isoformat(),
                last_seen_location=last_seen_location,
                reported_by=reported_by,
            ),
        )

    def mark_as_found(self, found_by: Optional[str] = None) -> None:
        operation = "mark_as_found"
        self._ensure_active(operation)
        self._guard(
            self._life_status.is_missing, operation, "found_requires_missing", "Only a missing member can be found"
        )

        previous = self._life_status
        self._life_status = previous.mark_found()
        self._commit(
            operation,
            MissingStatusChanged(
                is_missing=False,
                missing_since=_iso(previous.missing_since),
                last_seen_location=previous.last_seen_location,
                reported_by=found_by,
            ),
        )

    def assign_to_polygamous_house(
        self,
        house_id: str,
        house_order: int,
        *,
        head_genders: Optional[FrozenSet[str]] = None,
    ) -> Verdict:
        """
        Place the member at the head of a S.40 house.

        The assignment must pass ``PolygamousHouseAssignmentPolicy``; any
        invalid verdict becomes a ``DomainInvariantViolation``. Returns the
        verdict so callers can see a court-discretion flag on success.
        """
        operation = "assign_to_polygamous_house"
        self._ensure_active(operation)
        verdict = PolygamousHouseAssignmentPolicy().evaluate(
            HouseAssignmentContext(self, house_id, house_order, head_genders)
        )
        self._guard(
            verdict.is_valid,
            operation,
            "house_assignment_lawful",
            verdict.rejection_reason or "House assignment rejected",
        )
        house_id = house_id.strip()
        self._guard(
            (house_id, house_order) != (self._polygamous_house_id, self._house_order),
            operation,
            "update_changes_state",
            "Member already heads this house",
        )

        previous_house = self._polygamous_house_id
        self._polygamous_house_id = house_id
        self._house_order = house_order
        self._commit(
            operation,
            PolygamousHouseAssigned(house_id=house_id, house_order=house_order, previous_house_id=previous_house),
            StatutoryStatusChanged(
                status="POLYGAMOUS_HOUSE_HEAD",
                legal_citation=verdict.legal_citation or S40_CITATION,
                details={
                    "house_id": house_id,
                    "house_order": house_order,
                    "requires_court_discretion": verdict.requires_court_discretion,
                },
            ),
        )
        return verdict

    def archive(self, reason: str, actor: str) -> None:
        operation = "archive"
        self._guard(not self._is_archived, operation, "archive_changes_state", "Member is already archived")
        self._guard(bool(reason and reason.strip()), operation, "archive_reason_required", "Archive reason is required")
        self._guard(bool(actor and actor.strip()), operation, "archive_actor_required", "Archiving actor is required")

        self._is_archived = True
        self._archived_at = self._clock.now()
        self._archived_by = actor
        self._archive_reason = reason.strip()
        self._commit(operation, FamilyMemberArchived(reason=self._archive_reason, archived_by=actor))

    def unarchive(self, actor: str) -> None:
        operation = "unarchive"
        self._guard(self._is_archived, operation, "archive_changes_state", "Member is not archived")
        self._guard(
            not self.is_deceased, operation, "deceased_stays_archived", "A deceased member cannot be unarchived"
        )

        self._is_archived = False
        self._archived_at = None
        self._archived_by = None
        self._archive_reason = None
        self._commit(operation, FamilyMemberUnarchived(unarchived_by=actor))

    def verify_national_id(self, verified_by: str, method: str) -> None:
        operation = "verify_national_id"
        self._ensure_active(operation)
        national_id = self._identity.national_id
        self._guard(national_id is not None, operation, "document_present", "No national ID is recorded")
        self._guard(
            not national_id.is_verified, operation, "verify_once", "National ID is already verified"
        )

        at = self._clock.now()
        identity = self._identity.with_national_id(national_id.verify(verified_by, method, at))

        self._identity = identity
        self._commit(
            operation,
            IdentityVerified(document_type="NATIONAL_ID", method=method, verified_by=verified_by, verified_at=at.isoformat()),
        )

    def verify_kra_pin(self, verified_by: str, method: str, tax_compliant: bool = False) -> None:
        operation = "verify_kra_pin"
        self._ensure_active(operation)
        kra_pin = self._identity.kra_pin
        self._guard(kra_pin is not None, operation, "document_present", "No KRA PIN is recorded")
        self._guard(not kra_pin.is_verified, operation, "verify_once", "KRA PIN is already verified")

        at = self._clock.now()
        identity = self._identity.with_kra_pin(kra_pin.verify(verified_by, method, at, tax_compliant))

        self._identity = identity
        self._commit(
            operation,
            IdentityVerified(document_type="KRA_PIN", method=method, verified_by=verified_by, verified_at=at.isoformat()),
        )

    def update_disability_status(
        self,
        has_disability: bool,
        *,
        details: Iterable[Union[DisabilityDetail, Mapping[str, Any]]] = (),
        registered_with_ncpwd: bool = False,
        ncpwd_card_number: Optional[str] = None,
        requires_supported_decision_making: bool = False,
    ) -> None:
        """Replace the disability status and re-run the S.29 assessment."""
        operation = "update_disability_status"
        self._ensure_active(operation)
        status = DisabilityStatus(
            has_disability=has_disability,
            details=tuple(d if isinstance(d, DisabilityDetail) else DisabilityDetail(**d) for d in details),
            registered_with_ncpwd=registered_with_ncpwd,
            ncpwd_card_number=ncpwd_card_number,
            requires_supported_decision_making=requires_supported_decision_making,
        )
        self._guard(status != self._disability_status, operation, "update_changes_state", "Disability status unchanged")

        previous = self._disability_status
        self._disability_status = status
        severity = status.highest_severity
        self._commit(
            operation,
            DisabilityStatusChanged(
                had_disability=previous.has_disability,
                has_disability=status.has_disability,
                highest_severity=severity.value if severity else None,
            ),
            _dependency_event(self.dependency_assessment),
        )

    def record_birth_location(self, location: KenyanLocation, updated_by: Optional[str] = None) -> None:
        operation = "record_birth_location"
        self._ensure_active(operation)
        self._guard(location != self._birth_location, operation, "update_changes_state", "Birth location unchanged")

        changes = {
            "birth_location": {
                "old": location_to_record(self._birth_location),
                "new": location_to_record(location),
            }
        }
        self._birth_location = location
        self._commit(operation, FamilyMemberUpdated(changes=changes, updated_by=updated_by))

    # =========================================================================
    # SELF-MONITORING
    # =========================================================================

    def _validate_invariants(self) -> None:
        super()._validate_invariants()
        if self.is_deceased and not self._is_archived:
            self._add_invariant_violation("Deceased member is not archived")
        if self._is_archived and not (self._archived_by and self._archive_reason):
            self._add_invariant_violation("Archived member has no actor or reason")
        conflict = _date_conflict(self._date_of_birth, self._identity, self._life_status)
        if conflict is not None:
            self._add_invariant_violation(conflict[1])
        if self._house_order is not None and self._house_order < 1:
            self._add_invariant_violation(f"House order {self._house_order} is below 1")

    # =========================================================================
    # PROJECTION
    # =========================================================================

    def to_projection(self) -> Dict[str, Any]:
        """
        Flat, JSON-friendly view of the member. Keys in
        ``DERIVED_ONLY_FIELDS`` are computed; the rest is what
        ``from_record`` reads back.
        """
        ident = self._identity
        national_id, kra_pin = ident.national_id, ident.kra_pin
        birth, death = ident.birth_certificate, ident.death_certificate
        status = self._life_status
        demo = self._demographics
        disability = self._disability_status
        primary = ident.primary_legal_id()
        assessment = self.dependency_assessment

        data: Dict[str, Any] = {
            "id": self._id,
            "family_id": self._family_id,
            "user_id": self._user_id,
            "version": self._version,
            "created_by": self._created_by,
            "first_name": self._name.first_name,
            "middle_name": self._name.middle_name,
            "last_name": self._name.last_name,
            "maiden_name": self._name.maiden_name,
            # identity documents
            "national_id": national_id.number if national_id else None,
            **_verification_fields("national_id", national_id.verification if national_id else None),
            "national_id_issue_date": _iso(national_id.issue_date) if national_id else None,
            "national_id_issue_place": national_id.issue_place if national_id else None,
            "kra_pin": kra_pin.pin if kra_pin else None,
            **_verification_fields("kra_pin", kra_pin.verification if kra_pin else None),
            "is_tax_compliant": kra_pin.is_tax_compliant if kra_pin else False,
            "kra_pin_registered_on": _iso(kra_pin.registered_on) if kra_pin else None,
            "birth_certificate_entry_number": birth.entry_number if birth else None,
            "birth_registration_date": _iso(birth.registration_date) if birth else None,
            "birth_registration_district": birth.registration_district if birth else None,
            "place_of_birth": birth.place_of_birth if birth else None,
            **_verification_fields("birth_certificate", birth.verification if birth else None),
            "death_certificate_number": status.death_certificate_number,
            "death_registration_date": _iso(death.registration_date) if death else None,
            "death_registration_district": death.registration_district if death else None,
            "alternative_identities": [_alternative_to_record(a) for a in ident.alternative_identities],
            "citizenship": ident.citizenship.value,
            "religion": project_value(ident.religion),
            "ethnicity": ident.ethnicity,
            "clan": ident.clan,
            "sub_clan": ident.sub_clan,
            # life status
            "life_state": status.state.value,
            "date_of_death": _iso(status.date_of_death),
            "place_of_death": status.place_of_death,
            "cause_of_death": status.cause_of_death,
            "missing_since": _iso(status.missing_since),
            "last_seen_location": status.last_seen_location,
            # personal
            "date_of_birth": _iso(self._date_of_birth),
            "gender": project_value(demo.gender),
            "marital_status": project_value(demo.marital_status),
            "languages": list(demo.languages),
            "is_urban_dweller": demo.is_urban_dweller,
            "occupation": self._occupation,
            **self._contact_view(self._contact),
            # disability
            "has_disability": disability.has_disability,
            "disability_details": [project_value(d) for d in disability.details],
            "registered_with_ncpwd": disability.registered_with_ncpwd,
            "ncpwd_card_number": disability.ncpwd_card_number,
            "requires_supported_decision_making": disability.requires_supported_decision_making,
            # locations and house
            "birth_location": location_to_record(self._birth_location),
            "death_location": location_to_record(self._death_location),
            "polygamous_house_id": self._polygamous_house_id,
            "house_order": self._house_order,
            # archive and audit
            "is_archived": self._is_archived,
            "archived_at": _iso(self._archived_at),
            "archived_by": self._archived_by,
            "archive_reason": self._archive_reason,
            "created_at": _iso(self._created_at),
            "updated_at": _iso(self._updated_at),
            # derived
            "full_name": self.full_name,
            "current_age": self.current_age,
            "is_minor": self.is_minor,
            "is_student_age": self.is_student_age,
            "is_alive": self.is_alive,
            "is_deceased": self.is_deceased,
            "is_missing": self.is_missing,
            "is_active": self.is_active,
            "legally_verified": ident.legally_verified,
            "customary_law_applicable": ident.customary_law_applicable,
            "primary_legal_id_type": primary.id_type.value if primary else None,
            "primary_legal_id_value": primary.value if primary else None,
            "is_potential_dependant": assessment.is_potential_dependant,
            "dependency_level": assessment.level.value,
            "dependency_basis": list(assessment.basis),
            "is_eligible_for_inheritance": self.is_eligible_for_inheritance,
            "is_eligible_for_presumption_of_death": self.is_eligible_for_presumption_of_death,
            "advisories": [a.to_dict() for a in self.advisories],
        }
        return data

    def __repr__(self) -> str:
        return f"FamilyMember(id={self._id!r}, name={self.full_name!r}, version={self._version})"
