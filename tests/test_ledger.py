"""Unit tests for the ledger store."""

import json
import math

import pytest

from core.storage import MemoryStore, StorageError
from journal.ledger import LedgerStore, LedgerValidationError
from journal.models import Decision, TradeRecord
from tests.helpers import BASE_TS, FailingStore, FakeClock

RECORDS_KEY = "trade-tracker-records"
CAPITAL_KEY = "starting-capital"


class TestLoad:
    """Test loading persisted state."""

    def test_empty_store_gives_defaults(self, ledger):
        state = ledger.state
        assert state.records == []
        assert state.starting_capital == 10000

    def test_loads_browser_layout(self):
        store = MemoryStore({
            RECORDS_KEY: json.dumps([
                {'id': 1, 'decision': 'Yes', 'tp': 50, 'sl': 20, 'timestamp': 1},
                {'id': 2, 'decision': 'No', 'tp': 40, 'sl': 20, 'timestamp': 2},
            ]),
            CAPITAL_KEY: "2500.5",
        })

        state = LedgerStore(store).state

        assert [r.id for r in state.records] == [1, 2]
        assert state.records[1].decision is Decision.LOSS
        assert state.starting_capital == 2500.5

    @pytest.mark.parametrize("raw", ["not json", "{}", "null", "42", ""])
    def test_unreadable_records_fall_back_to_empty(self, raw):
        store = MemoryStore({RECORDS_KEY: raw})
        assert LedgerStore(store).records == []

    @pytest.mark.parametrize("raw", ["abc", "", "-100", "NaN", "inf"])
    def test_bad_capital_falls_back_to_default(self, raw):
        store = MemoryStore({CAPITAL_KEY: raw})
        assert LedgerStore(store).starting_capital == 10000

    def test_malformed_entries_are_skipped(self):
        store = MemoryStore({RECORDS_KEY: json.dumps([
            {'id': 1, 'decision': 'Yes', 'tp': 50, 'sl': 20, 'timestamp': 1},
            {'id': 2, 'decision': 'Perhaps', 'tp': 50, 'sl': 20, 'timestamp': 2},
            "garbage",
            {'id': 1, 'decision': 'No', 'tp': 5, 'sl': 5, 'timestamp': 3},
            {'id': 4, 'decision': 'No', 'tp': 5, 'sl': 5, 'timestamp': 4},
        ])})

        records = LedgerStore(store).records

        assert [r.id for r in records] == [1, 4]
        assert records[0].decision is Decision.WIN

    def test_out_of_range_numbers_are_skipped(self):
        huge = "1" + "0" * 400
        raw = (
            "[{\"id\": 1, \"decision\": \"Yes\", \"tp\": " + huge + ", \"sl\": 1, \"timestamp\": 1},"
            " {\"id\": 2, \"decision\": \"No\", \"tp\": 5, \"sl\": 5, \"timestamp\": 2}]"
        )
        store = MemoryStore({RECORDS_KEY: raw})

        records = LedgerStore(store).records

        assert [r.id for r in records] == [2]

    def test_load_never_raises(self):
        store = MemoryStore({RECORDS_KEY: "[{", CAPITAL_KEY: "{}"})
        state = LedgerStore(store).load()
        assert state.records == []
        assert state.starting_capital == 10000


class TestAppend:
    """Test logging new trades."""

    def test_append_returns_record(self, ledger):
        record = ledger.append(Decision.WIN, 50, 20)

        assert record == TradeRecord(BASE_TS, Decision.WIN, 50, 20, BASE_TS)
        assert ledger.records == [record]

    def test_append_accepts_literals_and_strings(self, ledger):
        record = ledger.append("No", " 12.5 ", "7")

        assert record.decision is Decision.LOSS
        assert record.take_profit == 12.5
        assert record.stop_loss == 7
        assert record.signed_result == -7

    def test_append_keeps_entry_order(self, ledger, clock):
        first = ledger.append(Decision.WIN, 1, 1)
        clock.advance()
        second = ledger.append(Decision.LOSS, 2, 2)

        assert ledger.records == [first, second]

    def test_ids_stay_unique_when_clock_stalls(self, store):
        ledger = LedgerStore(store, clock=FakeClock(BASE_TS))

        ids = [ledger.append(Decision.WIN, 1, 1).id for _ in range(3)]

        assert ids == [BASE_TS, BASE_TS + 1, BASE_TS + 2]
        assert all(r.timestamp == BASE_TS for r in ledger.records)

    def test_append_persists_immediately(self, ledger, store):
        ledger.append(Decision.WIN, 50.0, 20)

        saved = json.loads(store.read(RECORDS_KEY))
        assert saved == [{
            'id': BASE_TS, 'decision': 'Yes', 'tp': 50, 'sl': 20, 'timestamp': BASE_TS,
        }]
        assert '"tp": 50,' in store.read(RECORDS_KEY)

    @pytest.mark.parametrize("tp,sl", [
        ("", "20"),
        ("50", ""),
        ("abc", "20"),
        (0, 20),
        (50, -1),
        (math.nan, 20),
        (50, math.inf),
        (True, 20),
        (None, 20),
        (10 ** 400, 20),
        ("1_000", 20),
        (50, "2_0"),
    ])
    def test_rejects_invalid_magnitudes(self, ledger, store, tp, sl):
        with pytest.raises(LedgerValidationError):
            ledger.append(Decision.WIN, tp, sl)

        assert ledger.records == []
        assert store.read(RECORDS_KEY) is None

    def test_rejects_unknown_decision(self, ledger):
        with pytest.raises(LedgerValidationError, match="Unknown decision"):
            ledger.append("Maybe", 50, 20)

    def test_validation_error_is_value_error(self, ledger):
        with pytest.raises(ValueError):
            ledger.append(Decision.WIN, -5, 20)


class TestRemoval:
    """Test remove-last and clear."""

    def test_remove_last_on_empty_is_noop(self, ledger, store):
        state = ledger.remove_last()

        assert state.records == []
        assert store.read(RECORDS_KEY) is None

    def test_remove_last_drops_only_newest(self, sample_ledger, store):
        before = list(sample_ledger.records)

        state = sample_ledger.remove_last()

        assert state.records == before[:-1]
        assert len(json.loads(store.read(RECORDS_KEY))) == 2

    def test_clear(self, sample_ledger, store):
        sample_ledger.set_starting_capital(5000)

        state = sample_ledger.clear()

        assert state.records == []
        assert state.starting_capital == 5000
        assert store.read(RECORDS_KEY) == "[]"


class TestStartingCapital:
    """Test the analytics baseline."""

    def test_set_starting_capital(self, ledger, store):
        state = ledger.set_starting_capital(2500)

        assert state.starting_capital == 2500
        assert store.read(CAPITAL_KEY) == "2500"

    def test_accepts_zero_and_strings(self, ledger, store):
        ledger.set_starting_capital("0")
        assert ledger.starting_capital == 0
        ledger.set_starting_capital("1234.5")
        assert store.read(CAPITAL_KEY) == "1234.5"

    @pytest.mark.parametrize("value", [-1, "abc", math.nan, math.inf, ""])
    def test_rejects_invalid_capital(self, ledger, value):
        with pytest.raises(LedgerValidationError):
            ledger.set_starting_capital(value)
        assert ledger.starting_capital == 10000

    def test_capital_saved_independently_of_records(self, sample_ledger, store):
        records_before = store.read(RECORDS_KEY)
        sample_ledger.set_starting_capital(20000)
        assert store.read(RECORDS_KEY) == records_before


class TestRoundTrip:
    """Test persisting then reloading."""

    def test_reload_is_identical(self, sample_ledger, store):
        sample_ledger.append(Decision.LOSS, 12.25, 3.5)
        sample_ledger.set_starting_capital(7500.75)

        reloaded = LedgerStore(store)

        assert reloaded.records == sample_ledger.records
        assert reloaded.starting_capital == 7500.75

    def test_state_is_a_snapshot(self, sample_ledger):
        state = sample_ledger.state
        sample_ledger.remove_last()
        assert len(state.records) == 3


class TestWriteFailures:
    """Test that failed saves keep the session's data."""

    def test_append_keeps_record_when_save_fails(self):
        ledger = LedgerStore(FailingStore(), clock=FakeClock())

        with pytest.raises(StorageError):
            ledger.append(Decision.WIN, 50, 20)

        assert len(ledger.records) == 1

    def test_capital_kept_when_save_fails(self):
        ledger = LedgerStore(FailingStore())

        with pytest.raises(StorageError):
            ledger.set_starting_capital(300)

        assert ledger.starting_capital == 300
