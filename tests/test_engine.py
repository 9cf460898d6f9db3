import pytest

from pricetrack.config import DEFAULT_POLICY, get_policy
from pricetrack.engine import (
    AmbiguousOrdering,
    IneligiblePlayer,
    apply_latest,
    assemble,
    build_state,
    current_price,
    filter_records,
    fold_record,
    initial_state,
    market_value,
    next_price,
    rolling_average,
    round_currency,
    sequence_records,
)
from pricetrack.models import PerformanceRecord, PriceState, PricedPlayer, RecordScope


def _player(base_price: int = 100_000) -> PricedPlayer:
    return PricedPlayer(identity="Sam Carter", team="Greenvale", base_price=base_price)


def _records(scores, *, season: int = 2024, name: str = "Sam Carter", team: str = "Greenvale"):
    return [
        PerformanceRecord(season=season, round=index, player_identity=name, team=team, score=score)
        for index, score in enumerate(scores, start=1)
    ]


def test_worked_example_trajectory():
    positions = assemble(_player(), _records([40, 60, 80, 20]))

    assert [p.rolling_average for p in positions[:3]] == [40, 50, 60]
    assert positions[3].rolling_average == pytest.approx(53.333333, rel=1e-6)
    assert [round_currency(p.market_value) for p in positions] == [200_000, 250_000, 300_000, 266_667]
    assert [p.price_before for p in positions] == [100_000, 100_000, 100_000, 150_000]
    assert [p.price_after for p in positions] == [100_000, 100_000, 150_000, 179_167]
    assert [p.window_size for p in positions] == [1, 2, 3, 3]
    assert positions[3].price_change == 29_167
    assert [p.phase for p in positions] == ["awaiting-data", "awaiting-data", "smoothing", "smoothing"]


def test_two_games_is_ineligible():
    with pytest.raises(IneligiblePlayer) as excinfo:
        assemble(_player(), _records([40, 60]))
    assert excinfo.value.games == 2
    assert excinfo.value.required == 3


def test_three_games_prices_only_last_position():
    positions = assemble(_player(), _records([40, 60, 80]))

    assert len(positions) == 3
    assert [p.price_change for p in positions] == [0, 0, 50_000]


def test_assemble_is_deterministic():
    records = _records([12, 77, 45, 91, 33, 60])
    assert assemble(_player(), records) == assemble(_player(), records)


def test_base_price_only_moves_prices():
    records = _records([40, 60, 80, 20, 95])
    low = assemble(_player(100_000), records)
    high = assemble(_player(400_000), records)

    for a, b in zip(low, high):
        assert a.rolling_average == b.rolling_average
        assert a.market_value == b.market_value
    for a, b in zip(low[2:], high[2:]):
        assert a.price_after != b.price_after


def test_rolling_average_stays_within_window_bounds():
    records = _records([5, 100, 42, 0, 63, 88, 17])
    for index in range(len(records)):
        window = [r.score for r in records[max(0, index - 2): index + 1]]
        average = rolling_average(records, index)
        assert min(window) <= average <= max(window)


def test_rolling_average_first_position_is_single_score():
    assert rolling_average(_records([37]), 0) == 37


def test_price_before_chains_from_previous_position():
    positions = assemble(_player(), _records([10, 90, 30, 70, 50, 20]))
    for previous, current in zip(positions, positions[1:]):
        assert current.price_before == previous.price_after


def test_current_price_matches_last_position():
    records = _records([40, 60, 80, 20])
    assert current_price(_player(), records) == 179_167


def test_next_price_holds_until_window_fills():
    assert next_price(100_000, 999_999, 0) == 100_000
    assert next_price(100_000, 999_999, 1) == 100_000
    assert next_price(100_000, 300_000, 2) == 150_000


def test_round_once_versus_round_twice():
    records = _records([1, 1, 2])
    player = _player(base_price=1)

    assert market_value(4 / 3) == pytest.approx(6666.6667, rel=1e-6)
    assert market_value(4 / 3, get_policy("ROUND_TWICE")) == 6667
    assert current_price(player, records) == 1667
    assert current_price(player, records, get_policy("ROUND_TWICE")) == 1668


def test_round_currency_rounds_half_up():
    assert round_currency(2.5) == 3
    assert round_currency(179_166.5) == 179_167
    assert round_currency(0.49) == 0
    assert round_currency(0.49999999999999994) == 0
    assert round_currency(-2.5) == -3


def test_custom_policy_window_and_minimum():
    policy = DEFAULT_POLICY.with_overrides(window_size=2, min_qualifying_games=2)
    positions = assemble(_player(), _records([40, 60]), policy)

    assert [p.window_size for p in positions] == [1, 2]
    # 0.75 * 100000 + 0.25 * (5000 * 50)
    assert positions[1].price_after == 137_500


def test_filter_keeps_whole_game_records_for_player():
    player = _player()
    records = _records([40, 60, 80]) + [
        PerformanceRecord(
            season=2024, round=1, player_identity="SAM CARTER", team="greenvale",
            scope=RecordScope.PARTIAL_PERIOD, score=12,
        ),
        PerformanceRecord(season=2024, round=1, player_identity="Sam Carter", team="Keilor", score=70),
        PerformanceRecord(season=2024, round=1, player_identity="Other Player", team="Greenvale", score=70),
    ]

    filtered = filter_records(records, player.key)
    assert [r.score for r in filtered] == [40, 60, 80]


def test_filter_keeps_duplicates():
    record = _records([40])[0]
    assert len(filter_records([record, record], _player().key)) == 2


def test_sequence_orders_by_season_then_round():
    records = [
        PerformanceRecord(season=2024, round=2, player_identity="a", team="t", score=3),
        PerformanceRecord(season=2023, round=10, player_identity="a", team="t", score=1),
        PerformanceRecord(season=2024, round="1", player_identity="a", team="t", score=2),
        PerformanceRecord(season=2024, round=10, player_identity="a", team="t", score=4),
    ]
    assert [r.score for r in sequence_records(records)] == [1, 2, 3, 4]


def test_sequence_is_stable_for_equal_keys():
    records = [
        PerformanceRecord(season=2024, round=3, player_identity="a", team="t", score=score)
        for score in (9, 1, 5)
    ]
    assert [r.score for r in sequence_records(records)] == [9, 1, 5]


def test_sequence_reports_text_rounds(caplog):
    records = [
        PerformanceRecord(season=2024, round="Grand Final", player_identity="a", team="t", score=5),
        PerformanceRecord(season=2024, round="Elimination Final", player_identity="a", team="t", score=4),
        PerformanceRecord(season=2024, round=18, player_identity="a", team="t", score=3),
    ]
    diagnostics: list[AmbiguousOrdering] = []

    ordered = sequence_records(records, diagnostics=diagnostics)

    assert [r.score for r in ordered] == [3, 4, 5]
    assert {issue.round_value for issue in diagnostics} == {"Grand Final", "Elimination Final"}
    assert "Grand Final" in caplog.text


def test_incremental_fold_matches_full_replay():
    player = _player()
    records = _records([40, 60, 80, 20, 55, 91, 3])
    full = assemble(player, records)

    state = initial_state(player.base_price)
    folded = []
    for record in records:
        state, position = fold_record(state, record)
        folded.append(position)

    assert folded == full
    assert state.price == full[-1].price_after
    assert len(state.recent_scores) == 3


def test_apply_latest_extends_stored_state():
    player = _player()
    records = _records([40, 60, 80, 20])
    stored = build_state(player.base_price, records[:3])

    state, position = apply_latest(stored, records[3])

    assert stored.price == 150_000
    assert position.index == 3
    assert position.price_before == 150_000
    assert state.price == 179_167
    assert state.positions == 4


def test_apply_latest_rejects_oversized_state():
    state = build_state(100_000, _records([1, 2, 3]))
    oversized = type(state)(positions=4, price=state.price, recent_scores=(1, 2, 3, 4))
    with pytest.raises(ValueError):
        apply_latest(oversized, _records([5])[0])


@pytest.mark.parametrize(
    "positions, scores",
    [(10, ()), (2, (40.0,)), (0, (40.0,))],
)
def test_apply_latest_rejects_state_with_mismatched_window(positions, scores):
    state = PriceState(positions=positions, price=100_000, recent_scores=scores)
    with pytest.raises(ValueError):
        apply_latest(state, _records([80])[0])


def test_apply_latest_accepts_state_with_short_history():
    state = PriceState(positions=1, price=100_000, recent_scores=(40.0,))

    state, position = apply_latest(state, _records([60])[0])

    assert position.window_size == 2
    assert position.rolling_average == 50
    assert position.price_after == 100_000
    assert state.recent_scores == (40.0, 60.0)
