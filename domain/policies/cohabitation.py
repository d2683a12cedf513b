"""
Mirathi - Cohabitation Evidence and S.29(5)

A woman living with a man as his wife (LSA S.3(5)) may claim as a
dependant under S.29(5). The claim turns on duration, recognition by
family or community, and the strength of the evidence.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Sequence, Tuple

from config import StatutoryConfig, get_config
from core.clock import SYSTEM_CLOCK, Clock
from domain.policies.base import Check, StatutoryPolicy, Verdict
from domain.value_objects.base import ValueObject, coerce_enum

S3_5_CITATION = "Law of Succession Act (Cap 160), s. 3(5)"
S29_5_CITATION = "Law of Succession Act (Cap 160), s. 29(5)"

DAYS_PER_YEAR = 365.25


class CohabitationRecognition(str, Enum):
    NONE = "NONE"
    FAMILY = "FAMILY"
    COMMUNITY = "COMMUNITY"
    BOTH = "BOTH"


class EvidenceStrength(str, Enum):
    WEAK = "WEAK"
    MODERATE = "MODERATE"
    STRONG = "STRONG"


@dataclass(frozen=True, slots=True)
class CohabitationInterruption(ValueObject):
    start_date: date
    end_date: date
    reason: Optional[str] = None

    def validate(self) -> None:
        if self.end_date < self.start_date:
            raise self._invalid("Interruption ends before it starts", "end_date", value=self.end_date)

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days


@dataclass(frozen=True, slots=True)
class CohabitationEvidence(ValueObject):
    start_date: date
    end_date: Optional[date] = None
    recognition: CohabitationRecognition = CohabitationRecognition.NONE
    evidence_documents: Tuple[str, ...] = ()
    witnesses: Tuple[str, ...] = ()
    is_registered: bool = False
    children_count: int = 0
    interruptions: Tuple[CohabitationInterruption, ...] = ()

    DOCUMENT_POINTS: ClassVar[int] = 10
    DOCUMENT_CAP: ClassVar[int] = 40
    WITNESS_POINTS: ClassVar[int] = 5
    WITNESS_CAP: ClassVar[int] = 20
    MUTUAL_RECOGNITION_POINTS: ClassVar[int] = 20
    SINGLE_RECOGNITION_POINTS: ClassVar[int] = 10
    REGISTRATION_POINTS: ClassVar[int] = 20

    def normalize(self) -> None:
        coerce_enum(self, "recognition", CohabitationRecognition)
        if self.recognition is None:
            self._set("recognition", CohabitationRecognition.NONE)
        self._set("evidence_documents", tuple(self.evidence_documents))
        self._set("witnesses", tuple(self.witnesses))
        self._set("interruptions", tuple(self.interruptions))

    def validate(self) -> None:
        if self.end_date is not None and self.end_date < self.start_date:
            raise self._invalid("Cohabitation ends before it starts", "end_date", value=self.end_date)
        if self.children_count < 0:
            raise self._invalid("Children count cannot be negative", "children_count", value=self.children_count)
        for interruption in self.interruptions:
            if interruption.start_date < self.start_date:
                raise self._invalid(
                    "Interruption starts before cohabitation", "interruptions", value=interruption.start_date
                )
            if self.end_date is not None and interruption.end_date > self.end_date:
                raise self._invalid(
                    "Interruption ends after cohabitation", "interruptions", value=interruption.end_date
                )

    @property
    def is_ongoing(self) -> bool:
        return self.end_date is None

    def effective_years(self, today: date) -> float:
        """Duration in years excluding interruptions."""
        end = self.end_date or today
        days = (end - self.start_date).days - sum(i.days for i in self.interruptions)
        return max(0.0, days / DAYS_PER_YEAR)

    @property
    def evidence_score(self) -> int:
        """0-100 from documents, witnesses, recognition and registration."""
        score = min(len(self.evidence_documents) * self.DOCUMENT_POINTS, self.DOCUMENT_CAP)
        score += min(len(self.witnesses) * self.WITNESS_POINTS, self.WITNESS_CAP)
        if self.recognition is CohabitationRecognition.BOTH:
            score += self.MUTUAL_RECOGNITION_POINTS
        elif self.recognition in (CohabitationRecognition.FAMILY, CohabitationRecognition.COMMUNITY):
            score += self.SINGLE_RECOGNITION_POINTS
        if self.is_registered:
            score += self.REGISTRATION_POINTS
        return min(score, 100)

    @property
    def evidence_strength(self) -> EvidenceStrength:
        score = self.evidence_score
        if score >= 70:
            return EvidenceStrength.STRONG
        if score >= 40:
            return EvidenceStrength.MODERATE
        return EvidenceStrength.WEAK

    def qualifies_under_s29_5(self, today: date, min_years: Optional[int] = None) -> bool:
        years = min_years if min_years is not None else get_config().statutory.cohabitation_min_years
        return (
            self.is_ongoing
            and self.recognition is not CohabitationRecognition.NONE
            and self.effective_years(today) >= years
        )

    def _derived_projection(self) -> Dict[str, Any]:
        return {
            "is_ongoing": self.is_ongoing,
            "evidence_score": self.evidence_score,
            "evidence_strength": self.evidence_strength.value,
        }


@dataclass(frozen=True)
class CohabitationContext:
    evidence: CohabitationEvidence
    today: Optional[date] = None
    ended_by_death: bool = False
    clock: Optional[Clock] = None

    @property
    def as_of(self) -> date:
        return self.today or (self.clock or SYSTEM_CLOCK).today()


class CohabitationPolicy(StatutoryPolicy[CohabitationContext]):
    """
    A relationship that ended only because the partner died still counts
    as ongoing for S.29(5); pass ``ended_by_death=True``.
    """

    name = "cohabitation"
    citation = S29_5_CITATION

    def __init__(self, statutory: Optional[StatutoryConfig] = None) -> None:
        StatutoryPolicy.__init__(self)
        self._statutory = statutory

    @property
    def rules(self) -> StatutoryConfig:
        return self._statutory or get_config().statutory

    def checks(self) -> Sequence[Check[CohabitationContext]]:
        return (
            Check(1, "relationship_subsisting", self._subsisting),
            Check(2, "minimum_duration", self._duration),
            Check(3, "recognition", self._recognition),
            Check(4, "evidence_strength", self._evidence),
        )

    @staticmethod
    def _subsisting(ctx: CohabitationContext) -> Optional[Verdict]:
        if not ctx.evidence.is_ongoing and not ctx.ended_by_death:
            return Verdict.reject(
                "Cohabitation ended before the death of the deceased", S29_5_CITATION
            )
        return None

    def _duration(self, ctx: CohabitationContext) -> Optional[Verdict]:
        years = ctx.evidence.effective_years(ctx.as_of)
        minimum = self.rules.cohabitation_min_years
        if years < minimum:
            return Verdict.reject(
                f"Cohabitation of {years:.1f} years is below the minimum duration of {minimum}",
                S3_5_CITATION,
            )
        return None

    @staticmethod
    def _recognition(ctx: CohabitationContext) -> Optional[Verdict]:
        if ctx.evidence.recognition is CohabitationRecognition.NONE:
            return Verdict.reject_for_review(
                "Relationship is not recognised by family or community", S3_5_CITATION
            )
        return None

    def _evidence(self, ctx: CohabitationContext) -> Optional[Verdict]:
        score = ctx.evidence.evidence_score
        threshold = self.rules.cohabitation_min_evidence_score
        if score < threshold:
            return Verdict.discretionary(
                f"Weak evidence (score {score} below {threshold}); court to weigh presumption of marriage",
                S3_5_CITATION,
            )
        return None
