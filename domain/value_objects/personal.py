"""
Mirathi - Personal Value Objects

Names, contact details, demographics, age and disability. Age-band
thresholds come from ``StatutoryConfig`` so they stay in one place.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Pattern, Tuple

from config import get_config
from core.clock import Clock
from domain.value_objects.base import DataQualityIssue, ValueObject, coerce_enum
from domain.value_objects.geographic import KenyanCounty


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    INTERSEX = "INTERSEX"
    OTHER = "OTHER"


class Religion(str, Enum):
    CHRISTIAN = "CHRISTIAN"
    CATHOLIC = "CATHOLIC"
    PROTESTANT = "PROTESTANT"
    PENTECOSTAL = "PENTECOSTAL"
    SEVENTH_DAY_ADVENTIST = "SEVENTH_DAY_ADVENTIST"
    ISLAM = "ISLAM"
    HINDU = "HINDU"
    BUDDHIST = "BUDDHIST"
    TRADITIONAL = "TRADITIONAL"
    ATHEIST = "ATHEIST"
    AGNOSTIC = "AGNOSTIC"
    OTHER = "OTHER"

    @property
    def is_christian(self) -> bool:
        return self in _CHRISTIAN_DENOMINATIONS


_CHRISTIAN_DENOMINATIONS = frozenset({
    Religion.CHRISTIAN,
    Religion.CATHOLIC,
    Religion.PROTESTANT,
    Religion.PENTECOSTAL,
    Religion.SEVENTH_DAY_ADVENTIST,
})


class MaritalStatus(str, Enum):
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    WIDOWED = "WIDOWED"
    SEPARATED = "SEPARATED"
    COHABITING = "COHABITING"


class DisabilityType(str, Enum):
    PHYSICAL = "PHYSICAL"
    VISUAL = "VISUAL"
    HEARING = "HEARING"
    SPEECH = "SPEECH"
    INTELLECTUAL = "INTELLECTUAL"
    MENTAL_HEALTH = "MENTAL_HEALTH"
    MULTIPLE = "MULTIPLE"
    OTHER = "OTHER"


class DisabilitySeverity(str, Enum):
    MILD = "MILD"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"
    PROFOUND = "PROFOUND"

    @property
    def rank(self) -> int:
        return list(DisabilitySeverity).index(self)


# =============================================================================
# NAME
# =============================================================================


@dataclass(frozen=True, slots=True)
class KenyanName(ValueObject):
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    maiden_name: Optional[str] = None

    PATTERN: ClassVar[Pattern[str]] = re.compile(r"^[^\W\d_](?:[^\W\d_]|[ '\-])*$")
    MAX_LENGTH: ClassVar[int] = 50

    def normalize(self) -> None:
        for name in ("first_name", "last_name", "middle_name", "maiden_name"):
            value = getattr(self, name)
            if value is not None:
                cleaned = re.sub(r"\s+", " ", str(value).strip())
                self._set(name, cleaned or None)

    def validate(self) -> None:
        for name in ("first_name", "last_name"):
            if not getattr(self, name):
                raise self._invalid(f"{name} is required", name)
        for name in ("first_name", "last_name", "middle_name", "maiden_name"):
            value = getattr(self, name)
            if value is None:
                continue
            if len(value) > self.MAX_LENGTH:
                raise self._invalid(
                    f"{name} exceeds {self.MAX_LENGTH} characters", name, length=len(value)
                )
            if not self.PATTERN.match(value):
                raise self._invalid(f"{name} contains invalid characters", name, value=value)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.middle_name, self.last_name) if p)

    @property
    def initials(self) -> str:
        return "".join(p[0].upper() for p in (self.first_name, self.middle_name, self.last_name) if p)

    def _derived_projection(self) -> Dict[str, Any]:
        return {"full_name": self.full_name}

    def __str__(self) -> str:
        return self.full_name


# =============================================================================
# CONTACT
# =============================================================================


PHONE_PATTERN = re.compile(r"^(?:\+?254|0)?([17]\d{8})$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_phone(raw: str) -> Optional[str]:
    """Return ``+254XXXXXXXXX`` or ``None`` when ``raw`` is not a Kenyan mobile/landline."""
    match = PHONE_PATTERN.match(re.sub(r"[\s()-]", "", raw))
    if not match:
        return None
    return f"+254{match.group(1)}"


@dataclass(frozen=True, slots=True)
class ContactInfo(ValueObject):
    phone_number: str
    secondary_phone: Optional[str] = None
    email: Optional[str] = None
    county: Optional[KenyanCounty] = None
    postal_address: Optional[str] = None

    def normalize(self) -> None:
        for name in ("phone_number", "secondary_phone"):
            raw = getattr(self, name)
            if raw is None:
                continue
            normalized = normalize_phone(str(raw))
            if normalized is None:
                raise self._invalid(f"Invalid Kenyan phone number: {raw!r}", name, value=raw)
            self._set(name, normalized)
        if self.email is not None:
            self._set("email", self.email.strip().lower() or None)
        if self.county is not None and not isinstance(self.county, KenyanCounty):
            self._set("county", KenyanCounty.parse(self.county))

    def validate(self) -> None:
        if not self.phone_number:
            raise self._invalid("Phone number is required", "phone_number")
        if self.secondary_phone is not None and self.secondary_phone == self.phone_number:
            raise self._invalid(
                "Secondary phone must differ from the primary phone",
                "secondary_phone",
                value=self.secondary_phone,
            )
        if self.email is None:
            return
        if not EMAIL_PATTERN.match(self.email):
            raise self._invalid(f"Invalid email address: {self.email!r}", "email", value=self.email)
        domain = self.email.rsplit("@", 1)[1]
        preferred = get_config().data_quality.preferred_email_domains
        if not any(domain == d or domain.endswith("." + d) for d in preferred):
            self._advise(
                DataQualityIssue.NON_PREFERRED_EMAIL_DOMAIN,
                "email",
                f"Email domain {domain!r} is not on the preferred list",
                domain=domain,
            )

    @property
    def is_safaricom_range(self) -> bool:
        return self.phone_number.startswith("+2547") or self.phone_number.startswith("+2541")


# =============================================================================
# DEMOGRAPHICS
# =============================================================================


@dataclass(frozen=True, slots=True)
class DemographicInfo(ValueObject):
    gender: Optional[Gender] = None
    religion: Optional[Religion] = None
    marital_status: Optional[MaritalStatus] = None
    ethnic_group: Optional[str] = None
    sub_ethnic_group: Optional[str] = None
    languages: Tuple[str, ...] = ()
    is_urban_dweller: bool = False

    def normalize(self) -> None:
        coerce_enum(self, "gender", Gender)
        coerce_enum(self, "religion", Religion)
        coerce_enum(self, "marital_status", MaritalStatus)
        for name in ("ethnic_group", "sub_ethnic_group"):
            value = getattr(self, name)
            if value is not None:
                self._set(name, value.strip().upper() or None)
        self._set("languages", tuple(str(lang).strip() for lang in self.languages))

    def validate(self) -> None:
        if any(not lang for lang in self.languages):
            raise self._invalid("Language entries cannot be empty", "languages")
        if len(set(l.lower() for l in self.languages)) != len(self.languages):
            raise self._invalid("Duplicate language entries", "languages")

    @property
    def is_muslim(self) -> bool:
        return self.religion is Religion.ISLAM

    @property
    def is_hindu(self) -> bool:
        return self.religion is Religion.HINDU

    @property
    def is_christian(self) -> bool:
        return self.religion is not None and self.religion.is_christian

    @property
    def speaks_kiswahili(self) -> bool:
        return any("swahili" in lang.lower() for lang in self.languages)


# =============================================================================
# AGE
# =============================================================================


def years_between(start: date, end: date) -> int:
    """Completed years from ``start`` to ``end``."""
    return end.year - start.year - ((end.month, end.day) < (start.month, start.day))


@dataclass(frozen=True, slots=True)
class AgeCalculation(ValueObject):
    """Age of a person on ``reference_date`` with the statutory age bands."""
    date_of_birth: date
    reference_date: date

    def validate(self) -> None:
        if self.date_of_birth > self.reference_date:
            raise self._invalid(
                "Date of birth cannot be in the future",
                "date_of_birth",
                value=self.date_of_birth,
                reference_date=self.reference_date,
            )
        max_age = get_config().statutory.max_human_age
        if self.age > max_age:
            raise self._invalid(
                f"Age {self.age} exceeds {max_age} years",
                "date_of_birth",
                value=self.date_of_birth,
                max=max_age,
            )

    @classmethod
    def from_clock(cls, date_of_birth: date, clock: Clock) -> "AgeCalculation":
        return cls(date_of_birth=date_of_birth, reference_date=clock.today())

    @property
    def age(self) -> int:
        return years_between(self.date_of_birth, self.reference_date)

    @property
    def is_minor(self) -> bool:
        return self.age < get_config().statutory.age_of_majority

    @property
    def is_young_adult(self) -> bool:
        statutory = get_config().statutory
        return statutory.age_of_majority <= self.age <= statutory.student_age_max

    @property
    def is_elderly(self) -> bool:
        return self.age >= get_config().statutory.elderly_age

    @property
    def years_until_majority(self) -> int:
        return max(0, get_config().statutory.age_of_majority - self.age)

    def _derived_projection(self) -> Dict[str, Any]:
        return {
            "age": self.age,
            "is_minor": self.is_minor,
            "is_young_adult": self.is_young_adult,
            "is_elderly": self.is_elderly,
        }


# =============================================================================
# DISABILITY
# =============================================================================


@dataclass(frozen=True, slots=True)
class DisabilityDetail(ValueObject):
    disability_type: DisabilityType
    severity: DisabilitySeverity
    description: Optional[str] = None
    onset_date: Optional[date] = None
    requires_assistance: bool = False

    def normalize(self) -> None:
        coerce_enum(self, "disability_type", DisabilityType)
        coerce_enum(self, "severity", DisabilitySeverity)

    def validate(self) -> None:
        if self.disability_type is None:
            raise self._invalid("Disability type is required", "disability_type")
        if self.severity is None:
            raise self._invalid("Disability severity is required", "severity")


@dataclass(frozen=True, slots=True)
class DisabilityStatus(ValueObject):
    """
    Disability facts relevant to S.29 dependency and legal capacity.

    NCPWD is the National Council for Persons with Disabilities.
    """
    has_disability: bool = False
    details: Tuple[DisabilityDetail, ...] = field(default=())
    registered_with_ncpwd: bool = False
    ncpwd_card_number: Optional[str] = None
    requires_supported_decision_making: bool = False

    def normalize(self) -> None:
        self._set("details", tuple(self.details))

    def validate(self) -> None:
        if not self.has_disability:
            if self.details:
                raise self._invalid("Disability details recorded without a disability", "details")
            if self.registered_with_ncpwd:
                raise self._invalid(
                    "Cannot be registered with NCPWD without a disability", "registered_with_ncpwd"
                )
        if self.registered_with_ncpwd and not self.ncpwd_card_number:
            raise self._invalid("NCPWD registration requires a card number", "ncpwd_card_number")

    @classmethod
    def none(cls) -> "DisabilityStatus":
        return cls()

    @property
    def highest_severity(self) -> Optional[DisabilitySeverity]:
        if not self.details:
            return None
        return max((d.severity for d in self.details), key=lambda s: s.rank)

    @property
    def has_severe_disability(self) -> bool:
        return self.highest_severity in (DisabilitySeverity.SEVERE, DisabilitySeverity.PROFOUND)

    @property
    def has_moderate_disability(self) -> bool:
        return self.highest_severity is DisabilitySeverity.MODERATE

    @property
    def qualifies_for_dependant_status(self) -> bool:
        return self.has_disability and (
            self.has_severe_disability or self.requires_supported_decision_making
        )

    @property
    def affects_legal_capacity(self) -> bool:
        return self.requires_supported_decision_making or self.has_severe_disability

    def _derived_projection(self) -> Dict[str, Any]:
        severity = self.highest_severity
        return {
            "highest_severity": severity.value if severity else None,
            "has_severe_disability": self.has_severe_disability,
            "qualifies_for_dependant_status": self.qualifies_for_dependant_status,
        }
