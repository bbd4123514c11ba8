"""Tests for request schema validation."""

from datetime import date

import pytest
from pydantic import ValidationError

from tradejournal.schemas.chart import ChartCreate, ChartUpdate
from tradejournal.schemas.preference import PreferenceUpdate
from tradejournal.schemas.stats import StatsQuery
from tradejournal.schemas.ticker import TickerCreate, TickerUpdate
from tradejournal.schemas.trade import ExitRecord, TradeCreate, TradeUpdate


def _trade(**overrides) -> dict:
    data = {
        "ticker_id": 1,
        "entry_date": "2024-01-01T00:00:00Z",
        "entry_price": 100,
        "shares": 10,
        "initial_stop_loss": 95,
    }
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# 1. Exit records
# ---------------------------------------------------------------------------

class TestExitRecord:
    def test_target_is_an_alias_for_strength(self):
        record = ExitRecord(price=110, shares=1, date="2024-01-02T00:00:00Z", reason="Target")
        assert record.reason == "strength"

    def test_reason_is_optional(self):
        assert ExitRecord(price=110, shares=1, date="2024-01-02T00:00:00Z").reason is None

    def test_unknown_reason_rejected(self):
        with pytest.raises(ValidationError):
            ExitRecord(price=110, shares=1, date="2024-01-02T00:00:00Z", reason="boredom")

    @pytest.mark.parametrize("field", ["price", "shares"])
    def test_non_positive_rejected(self, field):
        data = {"price": 110, "shares": 1, "date": "2024-01-02T00:00:00Z", field: 0}
        with pytest.raises(ValidationError):
            ExitRecord(**data)


# ---------------------------------------------------------------------------
# 2. Trades
# ---------------------------------------------------------------------------

class TestTradeCreate:
    def test_defaults(self):
        trade = TradeCreate(**_trade())
        assert trade.direction == "long"
        assert trade.exits == []
        assert trade.status is None

    def test_direction_is_normalized(self):
        assert TradeCreate(**_trade(direction=" SHORT ")).direction == "short"

    def test_unknown_direction_rejected(self):
        with pytest.raises(ValidationError):
            TradeCreate(**_trade(direction="sideways"))

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TradeCreate(**_trade(status="pending"))

    def test_exits_cannot_exceed_shares(self):
        exits = [{"price": 110, "shares": 11, "date": "2024-01-02T00:00:00Z"}]
        with pytest.raises(ValidationError, match="exits total"):
            TradeCreate(**_trade(exits=exits))

    def test_exits_may_equal_shares(self):
        exits = [{"price": 110, "shares": 4, "date": "2024-01-02T00:00:00Z"},
                 {"price": 111, "shares": 6, "date": "2024-01-03T00:00:00Z"}]
        assert len(TradeCreate(**_trade(exits=exits)).exits) == 2


class TestTradeUpdate:
    def test_empty_update(self):
        assert TradeUpdate().model_dump(exclude_unset=True) == {}

    def test_target_size_not_accepted(self):
        update = TradeUpdate(target_position_size=5000)
        assert "target_position_size" not in update.model_dump()

    def test_exit_check_applies_when_both_given(self):
        with pytest.raises(ValidationError):
            TradeUpdate(shares=2, exits=[{"price": 110, "shares": 3, "date": "2024-01-02T00:00:00Z"}])


# ---------------------------------------------------------------------------
# 3. Tickers and preferences
# ---------------------------------------------------------------------------

class TestTickerSchemas:
    def test_symbol_upper_cased(self):
        assert TickerCreate(symbol=" nvda ", name="Nvidia").symbol == "NVDA"

    def test_blank_symbol_rejected(self):
        with pytest.raises(ValidationError):
            TickerCreate(symbol="   ", name="Blank")

    def test_update_symbol_optional(self):
        assert TickerUpdate(name="Renamed").symbol is None


def test_target_position_size_must_be_positive():
    with pytest.raises(ValidationError):
        PreferenceUpdate(target_position_size=0)


# ---------------------------------------------------------------------------
# 4. Statistics query
# ---------------------------------------------------------------------------

class TestStatsQuery:
    def test_defaults(self):
        options = StatsQuery().to_options()
        assert options.status_filter == "closed-and-partial"
        assert options.start_date is None
        assert options.end_date is None

    def test_timeframe_preset(self):
        options = StatsQuery(timeframe="month").to_options(today=date(2024, 3, 31))
        assert options.start_date == date(2024, 3, 1)
        assert options.end_date == date(2024, 3, 31)

    def test_explicit_dates_win_over_timeframe(self):
        query = StatsQuery(timeframe="week", start_date=date(2024, 1, 1))
        options = query.to_options(today=date(2024, 3, 31))
        assert options.start_date == date(2024, 1, 1)
        assert options.end_date is None

    def test_custom_timeframe_means_no_preset(self):
        assert StatsQuery(timeframe="custom").timeframe is None

    def test_unknown_timeframe_rejected(self):
        with pytest.raises(ValidationError):
            StatsQuery(timeframe="decade")

    def test_reversed_window_rejected(self):
        with pytest.raises(ValidationError):
            StatsQuery(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))

    def test_unknown_status_filter_rejected(self):
        with pytest.raises(ValidationError):
            StatsQuery(status_filter="open")


# ---------------------------------------------------------------------------
# 5. Charts
# ---------------------------------------------------------------------------

class TestChartSchemas:
    def test_defaults(self):
        chart = ChartCreate(ticker_id=1)
        assert chart.timeframe == "daily"
        assert chart.timestamp is None
        assert chart.tags == []

    def test_timeframe_is_normalized(self):
        assert ChartCreate(ticker_id=1, timeframe=" Weekly ").timeframe == "weekly"

    def test_unknown_timeframe_rejected(self):
        with pytest.raises(ValidationError):
            ChartCreate(ticker_id=1, timeframe="hourly")

    def test_tags_are_cleaned(self):
        chart = ChartCreate(ticker_id=1, tags=[" base ", "", "base", "breakout"])
        assert chart.tags == ["base", "breakout"]

    def test_measurement_needs_a_name(self):
        with pytest.raises(ValidationError):
            ChartCreate(ticker_id=1, measurements=[{"name": "", "start_price": 1, "end_price": 2}])

    def test_update_leaves_unset_fields_out(self):
        assert ChartUpdate(notes="cup and handle").model_dump(exclude_unset=True) == {
            "notes": "cup and handle"
        }
