"""
Configuration settings for the Trade Tracker.

Centralized config makes it easy to modify behavior without touching core logic.
"""
from dataclasses import dataclass, field
from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

_BASE_DIR = Path(__file__).parent


@dataclass
class StorageConfig:
    """Ledger persistence configuration."""
    backend: str = os.getenv("TRADE_TRACKER_STORAGE", "disk")  # disk, memory
    records_key: str = "trade-tracker-records"
    capital_key: str = "starting-capital"
    default_starting_capital: float = 10000.0


@dataclass
class UIConfig:
    """User interface settings."""
    page_title: str = "Trade Backtesting Tracker"
    chart_height: int = 300
    max_history_rows: int = 200  # Newest records shown in the list
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@dataclass
class Paths:
    """File system paths."""
    base_dir: Path = _BASE_DIR
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("TRADE_TRACKER_DATA_DIR", str(_BASE_DIR / "data")))
    )
    store_dir: Path = field(init=False)
    export_dir: Path = field(init=False)

    def __post_init__(self):
        self.store_dir = self.data_dir / "ledger"
        self.export_dir = self.data_dir / "exports"

        # Create directories if they don't exist
        self.store_dir.mkdir(parents=True, exist_ok=True)
        self.export_dir.mkdir(parents=True, exist_ok=True)


# Global config instances
storage_config = StorageConfig()
ui_config = UIConfig()
paths = Paths()
