"""
Ledger store - the append-only record of trade outcomes.

Every mutation is written straight through to storage. The in-memory
ledger stays the source of truth for the session even if a write fails.
"""
import json
import math
import time
from typing import Any, Callable, List, Optional, Union
import logging

from config import StorageConfig, storage_config
from core.storage import KeyValueStore, create_store
from .models import Decision, LedgerState, TradeRecord, format_number

logger = logging.getLogger(__name__)


class LedgerValidationError(ValueError):
    """Raised when a trade or starting capital value is rejected."""
    pass


def _now_ms() -> int:
    return int(time.time() * 1000)


def _coerce_number(value: Any, name: str) -> float:
    """Accept numbers and numeric strings, the way a form delivers them."""
    if isinstance(value, bool):
        raise LedgerValidationError(f"{name} must be a number")

    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise LedgerValidationError(f"{name} is required")
        if "_" in value:
            raise LedgerValidationError(f"{name} must be a number, got '{value}'")
        try:
            value = float(value)
        except ValueError:
            raise LedgerValidationError(f"{name} must be a number, got '{value}'")

    if not isinstance(value, (int, float)):
        raise LedgerValidationError(f"{name} must be a number")

    try:
        value = float(value)
    except OverflowError:
        raise LedgerValidationError(f"{name} is too large")
    if not math.isfinite(value):
        raise LedgerValidationError(f"{name} must be finite")

    return value


def validate_magnitude(value: Any, name: str) -> float:
    """TP and SL must be strictly positive numbers."""
    value = _coerce_number(value, name)
    if value <= 0:
        raise LedgerValidationError(f"{name} must be greater than zero")
    return value


def validate_capital(value: Any) -> float:
    """Starting capital must be a non-negative number."""
    value = _coerce_number(value, "Starting capital")
    if value < 0:
        raise LedgerValidationError("Starting capital cannot be negative")
    return value


class LedgerStore:
    """
    Own the trade ledger and its persistence.

    Records live under one storage key as a JSON array, starting capital
    under another as a decimal string. The two are saved independently.
    """

    def __init__(self, store: Optional[KeyValueStore] = None,
                 clock: Optional[Callable[[], int]] = None,
                 config: Optional[StorageConfig] = None):
        """
        Initialize and load the persisted ledger.

        Args:
            store: Key-value storage (built from config if not provided)
            clock: Returns the current time in epoch milliseconds
            config: Storage configuration (uses default if not provided)
        """
        self.store = store or create_store()
        self.clock = clock or _now_ms
        self.config = config or storage_config

        self.records: List[TradeRecord] = []
        self.starting_capital: float = self.config.default_starting_capital
        self.load()

        logger.info(f"LedgerStore initialized with {len(self.records)} historical trades")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> LedgerState:
        """Read both fields from storage. Bad data falls back to defaults."""
        self.records = self._load_records()
        self.starting_capital = self._load_capital()
        return self.state

    def _load_records(self) -> List[TradeRecord]:
        raw = self.store.read(self.config.records_key)
        if raw is None:
            return []

        try:
            entries = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable trade records: {e}")
            return []

        if not isinstance(entries, list):
            logger.warning("Discarding trade records: stored value is not a list")
            return []

        records = []
        seen_ids = set()
        for entry in entries:
            try:
                record = TradeRecord.from_dict(entry)
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping malformed trade record {entry!r}: {e}")
                continue

            if record.id in seen_ids:
                logger.warning(f"Skipping duplicate trade record id {record.id}")
                continue

            seen_ids.add(record.id)
            records.append(record)

        logger.debug(f"Loaded {len(records)} trades")
        return records

    def _load_capital(self) -> float:
        default = self.config.default_starting_capital
        raw = self.store.read(self.config.capital_key)
        if raw is None:
            return default

        try:
            return validate_capital(raw)
        except LedgerValidationError as e:
            logger.warning(f"Using default starting capital, stored value rejected: {e}")
            return default

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def _save_records(self) -> None:
        payload = json.dumps([r.to_dict() for r in self.records], ensure_ascii=False)
        self.store.write(self.config.records_key, payload)
        logger.debug(f"Saved {len(self.records)} trades")

    def _save_capital(self) -> None:
        self.store.write(self.config.capital_key, format_number(self.starting_capital))
        logger.debug(f"Saved starting capital {self.starting_capital}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @property
    def state(self) -> LedgerState:
        """Snapshot of the current ledger."""
        return LedgerState(records=list(self.records),
                           starting_capital=self.starting_capital)

    def _next_id(self, now: int) -> int:
        if self.records and now <= self.records[-1].id:
            return self.records[-1].id + 1
        return now

    def append(self, decision: Union[Decision, str], take_profit: Any,
               stop_loss: Any) -> TradeRecord:
        """
        Log a new trade at the end of the ledger.

        Args:
            decision: Decision.WIN / Decision.LOSS, or 'Yes' / 'No'
            take_profit: Take-profit magnitude (number or numeric string)
            stop_loss: Stop-loss magnitude (number or numeric string)

        Returns:
            The new record

        Raises:
            LedgerValidationError: if any input is rejected
            StorageError: if the ledger could not be saved (record is kept)
        """
        try:
            decision = Decision(decision)
        except ValueError:
            raise LedgerValidationError(f"Unknown decision: {decision!r}")

        take_profit = validate_magnitude(take_profit, "Take profit")
        stop_loss = validate_magnitude(stop_loss, "Stop loss")

        now = self.clock()
        record = TradeRecord(
            id=self._next_id(now),
            decision=decision,
            take_profit=take_profit,
            stop_loss=stop_loss,
            timestamp=now,
        )

        self.records.append(record)
        logger.info(f"Logged trade {record.id}: {decision.name} "
                    f"(TP {format_number(take_profit)}, SL {format_number(stop_loss)})")
        self._save_records()

        return record

    def remove_last(self) -> LedgerState:
        """Drop the most recent trade. No-op on an empty ledger."""
        if not self.records:
            logger.debug("remove_last on empty ledger")
            return self.state

        removed = self.records.pop()
        logger.info(f"Removed trade {removed.id}")
        self._save_records()
        return self.state

    def clear(self) -> LedgerState:
        """Remove all trades. Starting capital is untouched."""
        count = len(self.records)
        self.records = []
        logger.info(f"Cleared {count} trades")
        self._save_records()
        return self.state

    def set_starting_capital(self, value: Any) -> LedgerState:
        """Replace the analytics baseline."""
        self.starting_capital = validate_capital(value)
        logger.info(f"Starting capital set to {format_number(self.starting_capital)}")
        self._save_capital()
        return self.state
