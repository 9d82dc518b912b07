"""
Trade ledger data model.

A record is one manually logged trade outcome: the take-profit and
stop-loss magnitudes that were set, and whether the trade hit TP or SL.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, List, Union
import math


class Decision(str, Enum):
    """Outcome of a trade. Values are the literals stored on disk."""
    WIN = "Yes"
    LOSS = "No"


Number = Union[int, float]


def format_number(value: Number) -> str:
    """
    Render a number the plain way: no currency, no trailing '.0'.

    50.0 -> '50', 12.5 -> '12.5', -0.0 -> '0'
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def normalize_number(value: Number) -> Number:
    """Integral floats become ints so JSON output reads 50, not 50.0."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_instant(timestamp_ms: int) -> str:
    """Epoch milliseconds as a UTC ISO-8601 instant with millisecond precision."""
    seconds, millis = divmod(int(timestamp_ms), 1000)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


@dataclass(frozen=True)
class TradeRecord:
    """One logged trade. Never modified after creation."""
    id: int
    decision: Decision
    take_profit: float
    stop_loss: float
    timestamp: int  # epoch milliseconds

    @property
    def is_win(self) -> bool:
        return self.decision is Decision.WIN

    @property
    def signed_result(self) -> float:
        """TP for a win, negative SL for a loss."""
        return self.take_profit if self.is_win else -self.stop_loss

    @property
    def created_at(self) -> datetime:
        """Creation time in the local timezone."""
        return datetime.fromtimestamp(self.timestamp / 1000)

    def to_dict(self) -> Dict[str, Any]:
        """Persisted layout: {id, decision, tp, sl, timestamp}."""
        return {
            'id': self.id,
            'decision': self.decision.value,
            'tp': normalize_number(self.take_profit),
            'sl': normalize_number(self.stop_loss),
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TradeRecord":
        """
        Build a record from its persisted layout.

        Raises:
            ValueError, KeyError, TypeError: if the entry is malformed
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected an object, got {type(data).__name__}")

        values = {}
        for key in ('id', 'tp', 'sl', 'timestamp'):
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"Field '{key}' is not a number")
            try:
                number = float(value)
            except OverflowError:
                raise ValueError(f"Field '{key}' is out of range")
            if not math.isfinite(number):
                raise ValueError(f"Field '{key}' is not finite")
            values[key] = value

        return cls(
            id=int(values['id']),
            decision=Decision(data['decision']),
            take_profit=values['tp'],
            stop_loss=values['sl'],
            timestamp=int(values['timestamp']),
        )


@dataclass
class LedgerState:
    """Snapshot of the ledger: records in entry order plus starting capital."""
    records: List[TradeRecord] = field(default_factory=list)
    starting_capital: float = 10000.0
