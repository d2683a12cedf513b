"""
Mirathi - Identity Document Value Objects

Each document carries its identifier, optional issuing metadata and an
independent ``Verification`` state. Verifying returns a new instance.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Pattern

from config import get_config
from core.clock import SYSTEM_CLOCK
from domain.value_objects.base import DataQualityIssue, ValueObject, coerce_enum


class Citizenship(str, Enum):
    KENYAN = "KENYAN"
    DUAL = "DUAL"
    FOREIGN = "FOREIGN"


class AlternativeIdType(str, Enum):
    PASSPORT = "PASSPORT"
    ALIEN_ID = "ALIEN_ID"
    REFUGEE_ID = "REFUGEE_ID"
    MILITARY_ID = "MILITARY_ID"
    DIPLOMATIC_ID = "DIPLOMATIC_ID"
    HUDUMA_NUMBER = "HUDUMA_NUMBER"


@dataclass(frozen=True, slots=True)
class Verification(ValueObject):
    """Either unverified, or verified by someone, by some method, at some time."""
    is_verified: bool = False
    verified_by: Optional[str] = None
    method: Optional[str] = None
    verified_at: Optional[datetime] = None

    def validate(self) -> None:
        if self.is_verified:
            if not (self.verified_by and self.verified_by.strip()):
                raise self._invalid("Verification requires a verifier", "verified_by")
            if not (self.method and self.method.strip()):
                raise self._invalid("Verification requires a method", "method")
            if self.verified_at is None:
                raise self._invalid("Verification requires a timestamp", "verified_at")
        elif any(v is not None for v in (self.verified_by, self.method, self.verified_at)):
            raise self._invalid(
                "Unverified documents cannot carry verification details",
                "is_verified",
            )

    @classmethod
    def unverified(cls) -> "Verification":
        return cls()

    @classmethod
    def verified(cls, by: str, method: str, at: datetime) -> "Verification":
        return cls(is_verified=True, verified_by=by, method=method, verified_at=at)


def _require_pattern(vo: ValueObject, field_name: str, value: str, pattern: Pattern[str], label: str) -> None:
    if not pattern.match(value):
        raise vo._invalid(
            f"Invalid {label} format: {value!r}",
            field_name,
            value=value,
            expected_format=pattern.pattern,
        )


def _as_of_field() -> Any:
    """Reference date for future-date checks; the aggregate supplies its clock's today."""
    return field(default=None, compare=False, repr=False, metadata={"projected": False})


def _not_in_future(vo: Any, field_name: str, value: Optional[date]) -> None:
    today = vo.as_of or SYSTEM_CLOCK.today()
    if value is not None and value > today:
        raise vo._invalid(f"{field_name} cannot be in the future", field_name, value=value, today=today)


@dataclass(frozen=True, slots=True)
class NationalId(ValueObject):
    """Kenyan national ID card number (7-9 digits)."""
    number: str
    verification: Verification = field(default_factory=Verification.unverified)
    issue_date: Optional[date] = None
    issue_place: Optional[str] = None
    as_of: Optional[date] = _as_of_field()

    PATTERN: ClassVar[Pattern[str]] = re.compile(r"^\d{7,9}$")

    def normalize(self) -> None:
        self._set("number", re.sub(r"[\s-]", "", str(self.number)))

    def validate(self) -> None:
        _require_pattern(self, "national_id", self.number, self.PATTERN, "national ID")
        _not_in_future(self, "issue_date", self.issue_date)

    @property
    def is_verified(self) -> bool:
        return self.verification.is_verified

    def verify(self, by: str, method: str, at: datetime) -> "NationalId":
        return replace(self, verification=Verification.verified(by, method, at))

    def __str__(self) -> str:
        return self.number


@dataclass(frozen=True, slots=True)
class KraPin(ValueObject):
    """KRA Personal Identification Number: A (individual) or P (entity), 9 digits, check letter."""
    pin: str
    verification: Verification = field(default_factory=Verification.unverified)
    is_tax_compliant: bool = False
    registered_on: Optional[date] = None
    as_of: Optional[date] = _as_of_field()

    PATTERN: ClassVar[Pattern[str]] = re.compile(r"^[AP]\d{9}[A-Z]$")

    def normalize(self) -> None:
        self._set("pin", str(self.pin).strip().upper())

    def validate(self) -> None:
        _require_pattern(self, "kra_pin", self.pin, self.PATTERN, "KRA PIN")
        _not_in_future(self, "registered_on", self.registered_on)
        if self.is_tax_compliant and not self.verification.is_verified:
            raise self._invalid("Tax compliance requires a verified PIN", "is_tax_compliant")

    @property
    def is_verified(self) -> bool:
        return self.verification.is_verified

    def verify(self, by: str, method: str, at: datetime, tax_compliant: bool = False) -> "KraPin":
        return replace(
            self,
            verification=Verification.verified(by, method, at),
            is_tax_compliant=tax_compliant,
        )

    def __str__(self) -> str:
        return self.pin


def _late_registration(vo: ValueObject, event_date: date, registered: Optional[date], code: DataQualityIssue) -> None:
    if registered is None:
        return
    days = (registered - event_date).days
    limit = get_config().data_quality.late_registration_days
    if days > limit:
        vo._advise(
            code,
            "registration_date",
            f"Registered {days} days after the event (limit {limit})",
            days=days,
            limit=limit,
        )


@dataclass(frozen=True, slots=True)
class BirthCertificate(ValueObject):
    """Birth registration under the Births and Deaths Registration Act (Cap 149)."""
    entry_number: str
    date_of_birth: date
    registration_date: Optional[date] = None
    place_of_birth: Optional[str] = None
    registration_district: Optional[str] = None
    verification: Verification = field(default_factory=Verification.unverified)
    as_of: Optional[date] = _as_of_field()

    PATTERN: ClassVar[Pattern[str]] = re.compile(r"^[A-Z0-9/-]{5,20}$")

    def normalize(self) -> None:
        self._set("entry_number", str(self.entry_number).strip().upper())

    def validate(self) -> None:
        _require_pattern(self, "entry_number", self.entry_number, self.PATTERN, "birth entry number")
        _not_in_future(self, "date_of_birth", self.date_of_birth)
        if self.registration_date is not None and self.registration_date < self.date_of_birth:
            raise self._invalid(
                "Birth cannot be registered before it occurred",
                "registration_date",
                value=self.registration_date,
                date_of_birth=self.date_of_birth,
            )
        _late_registration(self, self.date_of_birth, self.registration_date, DataQualityIssue.LATE_BIRTH_REGISTRATION)

    @property
    def is_verified(self) -> bool:
        return self.verification.is_verified

    def verify(self, by: str, method: str, at: datetime) -> "BirthCertificate":
        return replace(self, verification=Verification.verified(by, method, at))


@dataclass(frozen=True, slots=True)
class DeathCertificate(ValueObject):
    """Death registration; required evidence for opening a succession cause."""
    certificate_number: str
    date_of_death: date
    registration_date: Optional[date] = None
    place_of_death: Optional[str] = None
    registration_district: Optional[str] = None
    cause_of_death: Optional[str] = None
    verification: Verification = field(default_factory=Verification.unverified)
    as_of: Optional[date] = _as_of_field()

    PATTERN: ClassVar[Pattern[str]] = re.compile(r"^[A-Z0-9/-]{5,20}$")

    def normalize(self) -> None:
        self._set("certificate_number", str(self.certificate_number).strip().upper())

    def validate(self) -> None:
        _require_pattern(
            self, "certificate_number", self.certificate_number, self.PATTERN, "death certificate number"
        )
        _not_in_future(self, "date_of_death", self.date_of_death)
        if self.registration_date is not None and self.registration_date < self.date_of_death:
            raise self._invalid(
                "Death cannot be registered before it occurred",
                "registration_date",
                value=self.registration_date,
                date_of_death=self.date_of_death,
            )
        _late_registration(self, self.date_of_death, self.registration_date, DataQualityIssue.LATE_DEATH_REGISTRATION)

    @property
    def is_verified(self) -> bool:
        return self.verification.is_verified


@dataclass(frozen=True, slots=True)
class AlternativeIdentity(ValueObject):
    """Non-national identity document (passport, alien card, refugee ID...)."""
    document_type: AlternativeIdType
    number: str
    issuing_country: str = "KENYA"
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    verification: Verification = field(default_factory=Verification.unverified)

    PASSPORT_PATTERN: ClassVar[Pattern[str]] = re.compile(r"^[A-Z0-9]{6,9}$")
    GENERIC_PATTERN: ClassVar[Pattern[str]] = re.compile(r"^[A-Z0-9/-]{4,20}$")

    def normalize(self) -> None:
        coerce_enum(self, "document_type", AlternativeIdType)
        if self.document_type is None:
            raise self._invalid("Document type is required", "document_type")
        self._set("number", re.sub(r"\s", "", str(self.number)).upper())
        if self.issuing_country is None:
            raise self._invalid("Issuing country is required", "issuing_country")
        self._set("issuing_country", str(self.issuing_country).strip().upper())

    def validate(self) -> None:
        pattern = (
            self.PASSPORT_PATTERN
            if self.document_type is AlternativeIdType.PASSPORT
            else self.GENERIC_PATTERN
        )
        _require_pattern(self, "number", self.number, pattern, self.document_type.value.lower())
        if not self.issuing_country:
            raise self._invalid("Issuing country is required", "issuing_country")
        if self.issue_date and self.expiry_date and self.expiry_date < self.issue_date:
            raise self._invalid(
                "Expiry date precedes issue date",
                "expiry_date",
                value=self.expiry_date,
                issue_date=self.issue_date,
            )

    @property
    def is_verified(self) -> bool:
        return self.verification.is_verified

    def is_expired(self, on: date) -> bool:
        return self.expiry_date is not None and self.expiry_date < on

    def verify(self, by: str, method: str, at: datetime) -> "AlternativeIdentity":
        return replace(self, verification=Verification.verified(by, method, at))

    def _derived_projection(self) -> Dict[str, Any]:
        return {"is_verified": self.is_verified}
