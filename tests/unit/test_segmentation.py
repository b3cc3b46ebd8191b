"""
RFM scoring and segmentation tests.

Run with: pytest tests/unit/test_segmentation.py -v
"""

import pytest

from models.customer import CustomerAnalytics, CustomerSegment
from services.segmentation_service import (
    frequency_score,
    lifetime_value,
    monetary_score,
    recency_score,
    segment,
    summarize_segments,
)


class TestSegment:
    """Ordered rules, first match wins."""

    @pytest.mark.parametrize(
        "scores, expected",
        [
            ((5, 5, 5), CustomerSegment.CHAMPIONS),
            ((4, 4, 4), CustomerSegment.CHAMPIONS),
            ((3, 3, 3), CustomerSegment.LOYAL),
            ((5, 5, 3), CustomerSegment.LOYAL),
            ((3, 1, 5), CustomerSegment.AT_RISK),
            ((4, 1, 1), CustomerSegment.AT_RISK),
            ((1, 1, 1), CustomerSegment.LOST),
            ((2, 2, 5), CustomerSegment.LOST),
            ((2, 3, 2), CustomerSegment.POTENTIAL),
            ((5, 3, 1), CustomerSegment.POTENTIAL),
        ],
    )
    def test_documented_combinations(self, scores, expected):
        assert segment(*scores) is expected

    def test_new_is_shadowed_by_at_risk_for_every_score(self):
        for recency in range(1, 6):
            for frequency in range(1, 6):
                for monetary in range(1, 6):
                    assert segment(recency, frequency, monetary) is not CustomerSegment.NEW

    def test_labels_serialize_as_display_names(self):
        assert CustomerSegment.AT_RISK.value == "At-Risk"


class TestScores:
    """Threshold boundaries of each 1-5 score."""

    @pytest.mark.parametrize(
        "days, expected",
        [(0, 5), (30, 5), (31, 4), (60, 4), (90, 3), (180, 2), (181, 1), (None, 1)],
    )
    def test_recency(self, days, expected):
        assert recency_score(days) == expected

    @pytest.mark.parametrize(
        "count, expected", [(0, 1), (1, 1), (2, 2), (4, 3), (7, 4), (10, 5), (25, 5)]
    )
    def test_frequency(self, count, expected):
        assert frequency_score(count) == expected

    @pytest.mark.parametrize(
        "spent, expected",
        [(0, 1), (49.99, 1), (50, 2), (200, 3), (500, 4), (999.99, 4), (1000, 5)],
    )
    def test_monetary(self, spent, expected):
        assert monetary_score(spent) == expected

    def test_lifetime_value(self):
        assert lifetime_value(40.0, 5) == pytest.approx(500.0)
        assert lifetime_value(0.0, 0) == 0.0


def _analytics(name, seg, clv):
    return CustomerAnalytics(
        id=name,
        name=name,
        total_appointments=1,
        total_spent=clv,
        avg_order_value=clv,
        customer_lifetime_value=clv,
        recency_score=3,
        frequency_score=3,
        monetary_score=3,
        segment=seg,
    )


def test_summarize_segments_counts_and_totals_in_first_seen_order():
    summaries = summarize_segments(
        [
            _analytics("a", CustomerSegment.LOST, 10.0),
            _analytics("b", CustomerSegment.LOYAL, 100.0),
            _analytics("c", CustomerSegment.LOST, 5.0),
        ]
    )
    assert [s.segment for s in summaries] == [CustomerSegment.LOST, CustomerSegment.LOYAL]
    assert summaries[0].count == 2
    assert summaries[0].total_value == pytest.approx(15.0)
    assert summaries[1].count == 1


def test_summarize_segments_empty():
    assert summarize_segments([]) == []
