"""Engagement scorer: per-member scores and the five team dimensions."""

import pytest

from conftest import TODAY, days_ago
from opspulse.services.analytics_rules import ENGAGEMENT_SUBJECTS
from opspulse.services.engagement import (
    MeasuredMetric,
    PlaceholderMetric,
    compute_engagement,
    compute_member_engagement,
    member_scores,
    word_count,
)
from opspulse.services.records import MemberRecord, ReportRecord


def _words(n):
    return " ".join(["word"] * n)


def test_word_count():
    assert word_count(None) == 0
    assert word_count("") == 0
    assert word_count("  fixed   the\tlogin bug\n") == 4


def test_metric_placeholder_flag():
    assert MeasuredMetric("Consistency", 10).to_dict() == {
        "subject": "Consistency", "value": 10, "placeholder": False,
    }
    assert PlaceholderMetric("Task Alignment", 90).to_dict()["placeholder"] is True


class TestMemberScores:
    def test_all_text_fields_counted(self):
        members = [MemberRecord(1, "Ada")]
        subs = [ReportRecord(1, 1, TODAY, "a b c", "d e", "f")]
        [score] = member_scores(members, subs, TODAY)
        assert score["submission_count"] == 1
        assert score["detail_word_count"] == 6
        assert score["avg_detail"] == 6
        assert score["consistency"] == pytest.approx(5)
        assert score["detail"] == pytest.approx(12)

    def test_scores_clamped_to_100(self):
        members = [MemberRecord(1, "Ada")]
        subs = [ReportRecord(i, 1, days_ago(i % 30), _words(200)) for i in range(25)]
        [score] = member_scores(members, subs, TODAY)
        assert score["consistency"] == 100
        assert score["detail"] == 100

    def test_window_is_thirty_days_inclusive(self):
        members = [MemberRecord(1, "Ada")]
        subs = [
            ReportRecord(1, 1, days_ago(29), "in"),
            ReportRecord(2, 1, days_ago(30), "out"),
        ]
        [score] = member_scores(members, subs, TODAY)
        assert score["submission_count"] == 1

    def test_silent_member_scores_zero(self):
        members = [MemberRecord(1, "Ada"), MemberRecord(2, "Linus")]
        subs = [ReportRecord(1, 1, TODAY, "hello")]
        scores = member_scores(members, subs, TODAY)
        assert [s["member_id"] for s in scores] == [1, 2]
        assert scores[1]["consistency"] == 0
        assert scores[1]["avg_detail"] == 0


class TestComputeEngagement:
    def test_five_dimensions_in_fixed_order(self, gateway, clock):
        result = compute_engagement(1, gateway=gateway, clock=clock)
        assert [d["subject"] for d in result] == list(ENGAGEMENT_SUBJECTS)
        assert [d["placeholder"] for d in result] == [False, False, True, True, True]
        assert [d["value"] for d in result[2:]] == [85, 70, 90]

    def test_no_members_gives_zero_measured_values(self, gateway, clock):
        result = compute_engagement(1, gateway=gateway, clock=clock)
        assert result[0]["value"] == 0
        assert result[1]["value"] == 0

    def test_team_average_includes_silent_members(self, gateway, clock):
        gateway.add_member(1)
        gateway.add_member(2)
        for i in range(10):
            gateway.add_submission(1, days_ago(i), prior=_words(15), current=_words(10))

        consistency, detail, *_ = compute_engagement(1, gateway=gateway, clock=clock)

        # member 1: 10/20 → 50, 25 words avg → 50; member 2: 0, 0
        assert consistency["value"] == 25
        assert detail["value"] == 25

    def test_values_within_bounds(self, gateway, clock):
        gateway.add_member(1)
        for i in range(40):
            gateway.add_submission(1, days_ago(i % 30), current=_words(500))
        for entry in compute_engagement(1, gateway=gateway, clock=clock):
            assert 0 <= entry["value"] <= 100

    def test_member_breakdown(self, gateway, clock):
        gateway.add_member(1, "Ada")
        gateway.add_submission(1, TODAY, current="shipped it")
        [row] = compute_member_engagement(1, gateway=gateway, clock=clock)
        assert row["name"] == "Ada"
        assert row["submission_count"] == 1
        assert row["detail_word_count"] == 2

    def test_reads_members_and_submissions(self, gateway, clock):
        compute_engagement(1, gateway=gateway, clock=clock)
        assert sorted(gateway.calls) == ["query_members", "query_report_submissions"]


@pytest.mark.parametrize("submitted,expected", [(0, 0), (4, 20), (20, 100), (30, 100)])
def test_consistency_scale(submitted, expected):
    members = [MemberRecord(1, "Ada")]
    subs = [ReportRecord(i, 1, TODAY) for i in range(submitted)]
    [score] = member_scores(members, subs, TODAY)
    assert score["consistency"] == pytest.approx(expected)
