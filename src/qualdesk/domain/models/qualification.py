"""Qualification and Amount domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

FACTOR_KEYS = tuple(f"factor{n}" for n in range(8, 20))


@dataclass(frozen=True)
class Amount:
    """Monetary amount with its currency code."""

    value: Decimal
    currency: str = "CLP"

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))


@dataclass(frozen=True)
class Qualification:
    """
    Tax qualification record owned by a broker.

    - factors holds F8..F19 as fractions in [0, 1]
    - unregistered marks a security that is not officially registered
    - taxpayer_id is the contributor's RUT, when known
    """

    qualification_id: str
    owner_id: str
    instrument_type: str
    market: str
    period: str
    amount: Amount
    unregistered: bool = False
    factors: dict[str, Decimal] = field(default_factory=dict)
    taxpayer_id: Optional[str] = None
    contributor_id: Optional[str] = None
    qualification_type: Optional[str] = None
    created_at: Optional[datetime] = None
    last_modified_at: Optional[datetime] = None

    def __hash__(self) -> int:
        return hash(self.qualification_id)

    @property
    def factor_sum(self) -> Decimal:
        """Sum of all tax factors."""
        return sum(self.factors.values(), Decimal("0"))

    @property
    def has_valid_factors(self) -> bool:
        """Factors are valid when they add up to at most 1."""
        return self.factor_sum <= 1

    def active_factor_labels(self) -> list[str]:
        """Return labels like F8, F12 for the factors greater than zero."""
        return [
            key.upper().replace("FACTOR", "F")
            for key in FACTOR_KEYS
            if self.factors.get(key, Decimal("0")) > 0
        ]

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dict for audit storage."""
        return {
            "qualification_id": self.qualification_id,
            "owner_id": self.owner_id,
            "instrument_type": self.instrument_type,
            "market": self.market,
            "period": self.period,
            "amount": {"value": str(self.amount.value), "currency": self.amount.currency},
            "unregistered": self.unregistered,
            "factors": {key: str(value) for key, value in self.factors.items()},
            "taxpayer_id": self.taxpayer_id,
            "contributor_id": self.contributor_id,
            "qualification_type": self.qualification_type,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_modified_at": (
                self.last_modified_at.isoformat() if self.last_modified_at else None
            ),
        }
