"""
Mirathi - Composite Kenyan Identity

Aggregates a person's identity documents with citizenship and cultural
attributes. ``legally_verified`` and ``customary_law_applicable`` are
cached on the instance; they are recomputed in ``__post_init__`` so every
construction path, including the ``with_*`` updates, refreshes them.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Optional, Tuple

from domain.value_objects.base import ValueObject, coerce_enum
from domain.value_objects.identity import (
    AlternativeIdType,
    AlternativeIdentity,
    BirthCertificate,
    Citizenship,
    DeathCertificate,
    KraPin,
    NationalId,
)
from domain.value_objects.personal import Religion


class LegalIdType(str, Enum):
    NATIONAL_ID = "NATIONAL_ID"
    PASSPORT = "PASSPORT"
    ALIEN_ID = "ALIEN_ID"
    BIRTH_CERTIFICATE = "BIRTH_CERTIFICATE"


@dataclass(frozen=True, slots=True)
class LegalIdentifier:
    """The identifier courts and registries should use for a person."""
    id_type: LegalIdType
    value: str
    verified: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.id_type.value, "value": self.value, "verified": self.verified}


@dataclass(frozen=True, slots=True)
class KenyanIdentity(ValueObject):
    national_id: Optional[NationalId] = None
    kra_pin: Optional[KraPin] = None
    birth_certificate: Optional[BirthCertificate] = None
    death_certificate: Optional[DeathCertificate] = None
    alternative_identities: Tuple[AlternativeIdentity, ...] = ()
    citizenship: Citizenship = Citizenship.KENYAN
    religion: Optional[Religion] = None
    ethnicity: Optional[str] = None
    clan: Optional[str] = None
    sub_clan: Optional[str] = None

    legally_verified: bool = field(default=False, init=False)
    customary_law_applicable: bool = field(default=True, init=False)

    # Religions whose personal law displaces customary succession (LSA S.2(3)-(4))
    CUSTOMARY_EXEMPT_RELIGIONS: ClassVar[FrozenSet[Religion]] = frozenset({Religion.ISLAM, Religion.HINDU})

    def normalize(self) -> None:
        self._set("alternative_identities", tuple(self.alternative_identities))
        coerce_enum(self, "citizenship", Citizenship)
        coerce_enum(self, "religion", Religion)
        for name in ("ethnicity", "clan", "sub_clan"):
            value = getattr(self, name)
            if value is not None:
                self._set(name, value.strip() or None)

    def validate(self) -> None:
        seen = set()
        for alt in self.alternative_identities:
            if alt.document_type in seen:
                raise self._invalid(
                    f"Only one {alt.document_type.value} may be recorded",
                    "alternative_identities",
                    document_type=alt.document_type.value,
                )
            seen.add(alt.document_type)

        if self.birth_certificate and self.death_certificate:
            born = self.birth_certificate.date_of_birth
            died = self.death_certificate.date_of_death
            if died < born:
                raise self._invalid(
                    "Date of death precedes date of birth",
                    "death_certificate",
                    date_of_birth=born,
                    date_of_death=died,
                )

        self._set("legally_verified", self.is_legally_verified())
        self._set("customary_law_applicable", self.applies_customary_law())

    # -------------------------------------------------------------------------
    # Functional updates
    # -------------------------------------------------------------------------

    def with_national_id(self, national_id: Optional[NationalId]) -> "KenyanIdentity":
        return replace(self, national_id=national_id)

    def with_kra_pin(self, kra_pin: Optional[KraPin]) -> "KenyanIdentity":
        return replace(self, kra_pin=kra_pin)

    def with_birth_certificate(self, certificate: Optional[BirthCertificate]) -> "KenyanIdentity":
        return replace(self, birth_certificate=certificate)

    def with_death_certificate(self, certificate: Optional[DeathCertificate]) -> "KenyanIdentity":
        return replace(self, death_certificate=certificate)

    def add_alternative_identity(self, identity: AlternativeIdentity) -> "KenyanIdentity":
        """Add ``identity``, replacing any existing document of the same type."""
        kept = tuple(a for a in self.alternative_identities if a.document_type is not identity.document_type)
        return replace(self, alternative_identities=kept + (identity,))

    def with_cultural_details(
        self,
        religion: Optional[Religion] = None,
        ethnicity: Optional[str] = None,
        clan: Optional[str] = None,
        sub_clan: Optional[str] = None,
    ) -> "KenyanIdentity":
        return replace(self, religion=religion, ethnicity=ethnicity, clan=clan, sub_clan=sub_clan)

    def with_citizenship(self, citizenship: Citizenship) -> "KenyanIdentity":
        return replace(self, citizenship=citizenship)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def alternative(self, document_type: AlternativeIdType) -> Optional[AlternativeIdentity]:
        for alt in self.alternative_identities:
            if alt.document_type is document_type:
                return alt
        return None

    def primary_legal_id(self) -> Optional[LegalIdentifier]:
        """National ID, then passport, then alien ID, then birth entry number."""
        if self.national_id is not None:
            return LegalIdentifier(LegalIdType.NATIONAL_ID, self.national_id.number, self.national_id.is_verified)
        for doc_type, id_type in (
            (AlternativeIdType.PASSPORT, LegalIdType.PASSPORT),
            (AlternativeIdType.ALIEN_ID, LegalIdType.ALIEN_ID),
        ):
            alt = self.alternative(doc_type)
            if alt is not None:
                return LegalIdentifier(id_type, alt.number, alt.is_verified)
        if self.birth_certificate is not None:
            return LegalIdentifier(
                LegalIdType.BIRTH_CERTIFICATE,
                self.birth_certificate.entry_number,
                self.birth_certificate.is_verified,
            )
        return None

    def is_legally_verified(self) -> bool:
        if self.national_id is not None and self.national_id.is_verified:
            return True
        passport = self.alternative(AlternativeIdType.PASSPORT)
        return passport is not None and passport.is_verified

    def applies_customary_law(self) -> bool:
        exempt = self.religion in self.CUSTOMARY_EXEMPT_RELIGIONS
        return not (exempt and not self.ethnicity)

    @property
    def is_kenyan_citizen(self) -> bool:
        return self.citizenship in (Citizenship.KENYAN, Citizenship.DUAL)

    @property
    def has_death_certificate(self) -> bool:
        return self.death_certificate is not None

    def _derived_projection(self) -> Dict[str, Any]:
        primary = self.primary_legal_id()
        return {"primary_legal_id": primary.to_dict() if primary else None}
