"""Tests for Score ordering."""

from __future__ import annotations

from veronica.strategy.schema import Score


class TestScore:
    """Scores compare by point, then by trading volume."""

    def test_neutral(self):
        score = Score.neutral()
        assert score.point == 0
        assert score.trading_volume == 0
        assert not score.is_buy

    def test_positive_point_is_buy(self):
        assert Score(point=1).is_buy
        assert not Score(point=-3, trading_volume=10).is_buy

    def test_point_dominates_volume(self):
        assert Score(point=2, trading_volume=1) > Score(point=1, trading_volume=1_000_000)

    def test_volume_breaks_ties(self):
        assert Score(point=4, trading_volume=20) > Score(point=4, trading_volume=10)

    def test_equal_scores(self):
        assert Score(point=4, trading_volume=20) == Score(point=4, trading_volume=20)
        assert hash(Score(point=4, trading_volume=20)) == hash(Score(point=4, trading_volume=20))

    def test_sorting_best_first(self):
        scores = [
            Score(point=1),
            Score(point=5, trading_volume=1),
            Score(point=5, trading_volume=9),
        ]
        assert sorted(scores, reverse=True) == [
            Score(point=5, trading_volume=9),
            Score(point=5, trading_volume=1),
            Score(point=1),
        ]
