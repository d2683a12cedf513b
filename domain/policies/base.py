"""
Mirathi - Statutory Policy Base

A policy is an ordered chain of numbered checks over a context object.
Each check returns ``None`` (passed) or a ``Verdict``:

- an invalid verdict short-circuits the chain and is the result;
- a valid verdict that requires court discretion is remembered and the
  chain continues, so a later hard rejection still wins.

Rejection is data, never an exception.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from observability.logging import DomainLogger
from observability.tracing import create_span

C = TypeVar("C")


@dataclass(frozen=True)
class Verdict:
    """
    Outcome of a statutory evaluation.

    ``is_valid`` and ``requires_court_discretion`` are independent axes:
    valid+discretion means "legal in principle, pending judicial
    clearance"; invalid+discretion means "rejected, but a court may still
    be asked".
    """
    is_valid: bool
    rejection_reason: Optional[str] = None
    legal_citation: Optional[str] = None
    requires_court_discretion: bool = False
    warning: Optional[str] = None
    check: Optional[str] = None
    warnings: Tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def approve(cls, legal_citation: Optional[str] = None, warning: Optional[str] = None) -> "Verdict":
        return cls(is_valid=True, legal_citation=legal_citation, warning=warning)

    @classmethod
    def reject(cls, reason: str, legal_citation: Optional[str] = None, check: Optional[str] = None) -> "Verdict":
        """Hard rejection; no court discretion."""
        return cls(is_valid=False, rejection_reason=reason, legal_citation=legal_citation, check=check)

    @classmethod
    def reject_for_review(
        cls, reason: str, legal_citation: Optional[str] = None, check: Optional[str] = None
    ) -> "Verdict":
        """Rejected, but flagged for human/judicial review."""
        return cls(
            is_valid=False,
            rejection_reason=reason,
            legal_citation=legal_citation,
            requires_court_discretion=True,
            check=check,
        )

    @classmethod
    def discretionary(
        cls, warning: str, legal_citation: Optional[str] = None, check: Optional[str] = None
    ) -> "Verdict":
        """Valid in principle, pending judicial clearance."""
        return cls(
            is_valid=True,
            legal_citation=legal_citation,
            requires_court_discretion=True,
            warning=warning,
            check=check,
        )

    @property
    def is_hard_rejection(self) -> bool:
        return not self.is_valid and not self.requires_court_discretion

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "rejection_reason": self.rejection_reason,
            "legal_citation": self.legal_citation,
            "requires_court_discretion": self.requires_court_discretion,
            "warning": self.warning,
            "check": self.check,
        }


@dataclass(frozen=True)
class Check(Generic[C]):
    """A numbered rule in a policy chain."""
    number: int
    name: str
    run: Callable[[C], Optional[Verdict]]

    @property
    def label(self) -> str:
        return f"{self.number}:{self.name}"


class StatutoryPolicy(ABC, Generic[C]):
    """
    Base class for statutory policy evaluators.

    Subclasses declare ``name`` and ``citation`` and return their ordered
    checks from ``checks``. ``evaluate`` is pure: it reads the context and
    returns a ``Verdict``.
    """

    name: str = "policy"
    citation: Optional[str] = None

    def __init__(self) -> None:
        self._log = DomainLogger("policies")

    @abstractmethod
    def checks(self) -> Sequence[Check[C]]:
        """Ordered checks, structurally fatal first, discretionary last."""

    def evaluate(self, context: C) -> Verdict:
        with create_span(f"policy.{self.name}.evaluate", attributes={"policy.name": self.name}) as span:
            verdict = self._run_chain(context)
            span.set_attribute("verdict.is_valid", verdict.is_valid)
            span.set_attribute("verdict.requires_court_discretion", verdict.requires_court_discretion)
            if verdict.check:
                span.set_attribute("verdict.check", verdict.check)

        self._log.verdict(
            self.name,
            verdict.is_valid,
            verdict.check,
            verdict.requires_court_discretion,
            reason=verdict.rejection_reason,
            warning=verdict.warning,
        )
        return verdict

    def _run_chain(self, context: C) -> Verdict:
        flagged: List[Verdict] = []
        for check in self.checks():
            outcome = check.run(context)
            if outcome is None:
                continue
            if outcome.check is None:
                outcome = replace(outcome, check=check.label)
            if not outcome.is_valid:
                return outcome
            if outcome.requires_court_discretion or outcome.warning:
                flagged.append(outcome)

        if not flagged:
            return Verdict.approve(legal_citation=self.citation)

        first = flagged[0]
        warnings = tuple(v.warning for v in flagged if v.warning)
        return Verdict(
            is_valid=True,
            legal_citation=first.legal_citation or self.citation,
            requires_court_discretion=any(v.requires_court_discretion for v in flagged),
            warning="; ".join(warnings) if warnings else None,
            check=first.check,
            warnings=warnings,
        )
