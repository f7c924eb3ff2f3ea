"""View models for mutation and aggregate outputs."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class DeletionResult:
    """
    Outcome of one delete run.

    A failed run names the identifier that raised; ids before it are in
    succeeded, ids after it are in remaining and were never attempted.
    """

    succeeded: list[str] = field(default_factory=list)
    failed: Optional[str] = None
    remaining: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed is None


@dataclass(frozen=True)
class QualificationStats:
    """Aggregate figures for one owner's qualifications."""

    total_qualifications: int = 0
    validated_factors: int = 0
    success_rate: float = 100.0
    amount_by_currency: dict[str, Decimal] = field(default_factory=dict)
    by_market: dict[str, int] = field(default_factory=dict)
    by_instrument: dict[str, int] = field(default_factory=dict)
