"""Tests for exit ledger resolution, status derivation and per-trade metrics."""

from datetime import datetime, timezone

import pytest

from tradejournal.services.exit_ledger import resolve_exit_ledger
from tradejournal.services.trade_metrics import (
    TradeInputs,
    TradeValidationError,
    active_stop_price,
    break_even_shares,
    calculate_trade_metrics,
    derive_trade_fields,
)
from tradejournal.services.trade_status import derive_status

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _exit(price, shares, date="2024-01-10T00:00:00+00:00", reason="strength"):
    return {"price": price, "shares": shares, "date": date, "reason": reason}


# ---------------------------------------------------------------------------
# 1. Exit ledger
# ---------------------------------------------------------------------------

class TestExitLedger:
    def test_empty_ledger(self):
        ledger = resolve_exit_ledger([], 10)
        assert ledger.exited_shares == 0
        assert ledger.completion_date is None
        assert ledger.remaining_shares == 10

    def test_none_ledger(self):
        ledger = resolve_exit_ledger(None, 10)
        assert ledger.exited_shares == 0
        assert ledger.fills == []

    def test_string_shares_are_coerced(self):
        ledger = resolve_exit_ledger([_exit("110", "4"), _exit(111, " 2 ")], 10)
        assert ledger.exited_shares == 6
        assert ledger.remaining_shares == 4

    def test_malformed_shares_count_as_zero(self):
        ledger = resolve_exit_ledger([_exit(110, "abc"), _exit(110, None), _exit(110, 3)], 10)
        assert ledger.exited_shares == 3

    def test_completion_date_is_latest_exit(self):
        ledger = resolve_exit_ledger(
            [
                _exit(110, 2, date="2024-01-20T00:00:00Z"),
                _exit(110, 2, date="2024-01-05T00:00:00Z"),
                _exit(110, 2, date="not a date"),
            ],
            10,
        )
        assert ledger.completion_date == datetime(2024, 1, 20, tzinfo=timezone.utc)

    def test_fills_are_ordered_by_date(self):
        ledger = resolve_exit_ledger(
            [_exit(120, 1, date="2024-02-01"), _exit(110, 1, date="2024-01-01")], 10
        )
        assert [f.price for f in ledger.fills] == [110, 120]


# ---------------------------------------------------------------------------
# 2. Status derivation
# ---------------------------------------------------------------------------

class TestDeriveStatus:
    def test_no_exits_defaults_to_open(self):
        assert derive_status(10, 0) == "open"

    def test_no_exits_keeps_manual_close(self):
        assert derive_status(10, 0, "closed") == "closed"

    def test_no_exits_keeps_submitted_partial(self):
        assert derive_status(10, 0, "partial") == "partial"

    def test_no_exits_unknown_status_defaults_to_open(self):
        assert derive_status(10, 0, "pending") == "open"

    def test_partial(self):
        assert derive_status(10, 4) == "partial"

    def test_closed(self):
        assert derive_status(10, 10) == "closed"

    def test_over_filled_clamps_to_closed(self):
        assert derive_status(10, 12) == "closed"

    @pytest.mark.parametrize("previous", [None, "open", "partial", "closed"])
    def test_ignores_previous_status_once_exits_exist(self, previous):
        assert derive_status(10, 4, previous) == "partial"
        assert derive_status(10, 10, previous) == "closed"


# ---------------------------------------------------------------------------
# 3. Input parsing
# ---------------------------------------------------------------------------

class TestTradeInputs:
    def test_missing_entry_price_rejected(self):
        with pytest.raises(TradeValidationError, match="entry_price"):
            TradeInputs.from_mapping({"shares": 10, "entry_date": "2024-01-01"})

    def test_non_numeric_shares_rejected(self):
        with pytest.raises(TradeValidationError, match="shares"):
            TradeInputs.from_mapping(
                {"entry_price": 100, "shares": "ten", "entry_date": "2024-01-01"}
            )

    def test_missing_entry_date_rejected(self):
        with pytest.raises(TradeValidationError, match="entry_date"):
            TradeInputs.from_mapping({"entry_price": 100, "shares": 10})

    def test_optional_garbage_degrades(self):
        inputs = TradeInputs.from_mapping({
            "entry_price": "100",
            "shares": "10",
            "entry_date": "2024-01-01",
            "initial_stop_loss": "n/a",
            "direction": "sideways",
            "current_price": "oops",
        })
        assert inputs.entry_price == 100
        assert inputs.initial_stop_loss == 0
        assert inputs.direction == "long"
        assert inputs.current_price is None


# ---------------------------------------------------------------------------
# 4. Realized metrics
# ---------------------------------------------------------------------------

def test_full_exit_long_trade(make_trade):
    trade = make_trade(exits=[_exit(110, 10)])
    assert trade["status"] == "closed"
    assert trade["position_size"] == 1000
    assert trade["risk_amount"] == 50
    assert trade["risk_percent"] == 5
    assert trade["profit_loss_amount"] == 100
    assert trade["profit_loss_percent"] == 10
    assert trade["r_ratio"] == 2
    assert trade["current_metrics"] is None


def test_partial_exit_long_trade(make_trade):
    trade = make_trade(exits=[_exit(110, 4)])
    assert trade["status"] == "partial"
    assert trade["profit_loss_amount"] == 40
    assert trade["profit_loss_percent"] == 4


def test_short_trade(make_trade):
    trade = make_trade(
        entry_price=50, shares=20, initial_stop_loss=55,
        direction="short", exits=[_exit(45, 20)],
    )
    assert trade["profit_loss_amount"] == 100
    assert trade["risk_amount"] == 100
    assert trade["r_ratio"] == 1
    assert trade["profit_loss_percent"] == 10


def test_stop_at_entry_has_zero_risk(make_trade):
    trade = make_trade(initial_stop_loss=100, exits=[_exit(110, 10)])
    assert trade["risk_amount"] == 0
    assert trade["risk_percent"] == 0
    assert trade["r_ratio"] == 0
    assert trade["profit_loss_amount"] == 100


def test_r_ratio_round_trips_to_profit_loss(make_trade):
    trade = make_trade(entry_price=37.25, shares=13, initial_stop_loss=34.1,
                       exits=[_exit(41.7, 5), _exit(33.9, 8)])
    assert trade["r_ratio"] * trade["risk_amount"] == pytest.approx(
        trade["profit_loss_amount"], abs=0.05
    )


def test_position_size_rounded_to_cents(make_trade):
    trade = make_trade(entry_price=10.333, shares=3)
    assert trade["position_size"] == 31.0


def test_derivation_is_idempotent(make_trade):
    first = make_trade(exits=[_exit(110, 4)], target_position_size=5000)
    second = derive_trade_fields(first, now=NOW)
    assert second == first


# ---------------------------------------------------------------------------
# 5. Days held
# ---------------------------------------------------------------------------

def test_days_held_closed_uses_last_exit(make_trade):
    trade = make_trade(exits=[
        _exit(110, 5, date="2024-01-04T00:00:00Z"),
        _exit(110, 5, date="2024-01-10T12:00:00Z"),
    ])
    assert trade["days_held"] == 10


def test_days_held_open_uses_now(make_trade):
    trade = make_trade(entry_date="2024-02-28T12:00:00Z")
    assert trade["days_held"] == 2


def test_days_held_entry_now_is_zero():
    metrics = calculate_trade_metrics(
        TradeInputs.from_mapping({"entry_price": 1, "shares": 1, "entry_date": NOW}),
        now=NOW,
    )
    assert metrics.days_held == 0


# ---------------------------------------------------------------------------
# 6. Normalization
# ---------------------------------------------------------------------------

def test_factor_of_one_keeps_raw_metrics(make_trade):
    trade = make_trade(exits=[_exit(110, 10)], target_position_size=1000)
    assert trade["normalization_factor"] == 1
    assert trade["normalized_metrics"] == {
        "profit_loss_amount": trade["profit_loss_amount"],
        "profit_loss_percent": trade["profit_loss_percent"],
        "r_ratio": trade["r_ratio"],
    }


def test_small_position_is_scaled_up(make_trade):
    trade = make_trade(exits=[_exit(110, 10)], target_position_size=5000)
    assert trade["normalization_factor"] == 0.2
    assert trade["normalized_metrics"]["profit_loss_amount"] == 500
    assert trade["normalized_metrics"]["profit_loss_percent"] == 10
    assert trade["normalized_metrics"]["r_ratio"] == 2


def test_missing_target_skips_normalization(make_trade):
    trade = make_trade(exits=[_exit(110, 10)], target_position_size=None)
    assert trade["normalization_factor"] is None
    assert trade["normalized_metrics"] is None


# ---------------------------------------------------------------------------
# 7. Current metrics
# ---------------------------------------------------------------------------

def test_break_even_shares_formula():
    # sell 4 at 110 (+40), stop 6 at 95 (-30): net positive
    assert break_even_shares(1, 100, 0, 10, 110, 95) == 4
    # realized gains already cover a full stop-out
    assert break_even_shares(1, 100, 40, 6, 105, 95) == 0
    # price sitting on the stop
    assert break_even_shares(1, 100, 0, 10, 95, 95) == 0
    # cannot reach break-even even selling everything
    assert break_even_shares(1, 100, -500, 10, 101, 95) == 10


def test_break_even_shares_short():
    # short at 50, stop 55, price 45: sell 5 (+25) and stop 5 (-25)
    assert break_even_shares(-1, 50, 0, 10, 45, 55) == 5


def test_active_stop_is_latest_modification():
    stops = [
        {"price": 98, "date": "2024-01-05T00:00:00Z"},
        {"price": 102, "date": "2024-01-09T00:00:00Z"},
        {"price": 99, "date": "2024-01-07T00:00:00Z"},
    ]
    assert active_stop_price(95, stops) == 102
    assert active_stop_price(95, []) == 95


def test_current_metrics_for_partial_trade(make_trade):
    trade = make_trade(
        exits=[_exit(110, 4)],
        current_price=105,
        modified_stops=[{"price": 100, "date": "2024-01-11T00:00:00Z"}],
    )
    current = trade["current_metrics"]
    assert current["remaining_shares"] == 6
    assert current["active_stop"] == 100
    assert current["profit_loss_amount"] == 30
    assert current["profit_loss_percent"] == 3
    assert current["r_ratio"] == 0.6
    assert current["risk_amount"] == 0
    assert current["break_even_shares"] == 0
    assert current["last_updated"] == NOW.isoformat()


def test_current_metrics_need_a_price(make_trade):
    trade = make_trade()
    assert trade["current_metrics"] is None


def test_closed_trade_has_no_current_metrics(make_trade):
    trade = make_trade(exits=[_exit(110, 10)], current_price=120)
    assert trade["current_metrics"] is None
