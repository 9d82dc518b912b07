"""
Trade journal module.

Log every trade outcome, keep the history, see how you are doing.
"""

from .models import Decision, TradeRecord, LedgerState
from .ledger import LedgerStore, LedgerValidationError
from .analytics import TradeAnalytics
from .export import records_to_csv, export_to_csv

__all__ = [
    "Decision",
    "TradeRecord",
    "LedgerState",
    "LedgerStore",
    "LedgerValidationError",
    "TradeAnalytics",
    "records_to_csv",
    "export_to_csv",
]
