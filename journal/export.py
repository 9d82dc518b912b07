"""
CSV export of the trade ledger.

Format:
    timestamp,decision,tp,sl,result
    2024-01-15T10:00:00.000Z,Yes,50,20,50

One row per trade in entry order. Numbers are written plain, so
spreadsheets and other tools read them without cleanup.
"""
from pathlib import Path
from typing import Iterable, Optional
import logging

import pandas as pd

from config import paths
from .models import TradeRecord, format_instant, format_number

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['timestamp', 'decision', 'tp', 'sl', 'result']


def records_to_frame(records: Iterable[TradeRecord]) -> pd.DataFrame:
    """Trades as export-ready text columns."""
    rows = [{
        'timestamp': format_instant(r.timestamp),
        'decision': r.decision.value,
        'tp': format_number(r.take_profit),
        'sl': format_number(r.stop_loss),
        'result': format_number(r.signed_result),
    } for r in records]
    return pd.DataFrame(rows, columns=CSV_COLUMNS, dtype=str)


def records_to_csv(records: Iterable[TradeRecord]) -> str:
    """
    Serialize trades to CSV text.

    Lines are joined with '\\n' and there is no trailing newline.
    """
    df = records_to_frame(records)
    text = df.to_csv(index=False, lineterminator="\n")
    return text.rstrip("\n")


def export_to_csv(records: Iterable[TradeRecord],
                  output_path: Optional[Path] = None) -> Path:
    """Write trades to a CSV file for analysis in Excel/Sheets."""
    output_path = Path(output_path or (paths.export_dir / "records.csv"))
    output_path.parent.mkdir(parents=True, exist_ok=True)

    text = records_to_csv(records)
    output_path.write_text(text, encoding="utf-8")

    logger.info(f"Exported trades to {output_path}")
    return output_path
