#!/usr/bin/env python3
"""
Trade Tracker - Demo

This script demonstrates the complete workflow:
1. Open a scratch ledger
2. Set starting capital
3. Log a handful of trades
4. Undo the last one
5. Print analytics
6. Export to CSV

Run this to verify everything works. Nothing is written to your real ledger.
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from core.storage import MemoryStore
from journal.ledger import LedgerStore
from journal.analytics import TradeAnalytics
from journal.export import records_to_csv, export_to_csv
from journal.models import Decision
from config import paths

import logging

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

SAMPLE_TRADES = [
    (Decision.WIN, 50, 20),
    (Decision.LOSS, 60, 20),
    (Decision.WIN, 30, 15),
    (Decision.LOSS, 40, 25),
    (Decision.WIN, 75, 25),
]


def main():
    print("""
╔══════════════════════════════════════════════════════════╗
║     TRADE TRACKER - DEMO                                 ║
╚══════════════════════════════════════════════════════════╝
    """)

    STARTING_CAPITAL = 10000

    print("\n[1/6] Opening scratch ledger...")
    ledger = LedgerStore(MemoryStore())

    print(f"[2/6] Starting capital: ${STARTING_CAPITAL:,.2f}")
    ledger.set_starting_capital(STARTING_CAPITAL)

    print(f"\n[3/6] Logging {len(SAMPLE_TRADES)} trades...")
    for decision, tp, sl in SAMPLE_TRADES:
        record = ledger.append(decision, tp, sl)
        print(f"  ✅ {decision.value:<3}  TP {tp:>4}  SL {sl:>4}  ->  {record.signed_result:+g}")

    print("\n[4/6] Removing the last trade...")
    ledger.remove_last()
    print(f"  ✅ {len(ledger.records)} trades remain")

    print("\n[5/6] Analytics:")
    analytics = TradeAnalytics(ledger.state)
    print(analytics.equity_curve().to_string(index=False))
    print(analytics.generate_report())

    print("[6/6] Export:")
    print(records_to_csv(ledger.records))
    output = export_to_csv(ledger.records, paths.export_dir / "demo_records.csv")
    print(f"\n  ✅ Written to {output}")

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print("=" * 60)
    print("\nTo open the tracker: python3 -m streamlit run ui/app.py")
    print("=" * 60)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nDemo interrupted by user")
    except Exception as e:
        logger.error(f"Demo failed: {e}", exc_info=True)
        print(f"\n❌ Error: {e}")
