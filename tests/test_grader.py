from __future__ import annotations

import random

import pytest

from rangetrainer.data.hands import ALL_HANDS
from rangetrainer.features.grading import grade_range_submission


def _reference() -> dict[str, object]:
    expected: dict[str, object] = {hand: "fold" for hand in ALL_HANDS}
    expected.update(
        {
            "AA": "raise",
            "KK": "raise",
            "AKs": "raise",
            "AQs": {"raise": 80, "fold": 20},
            "A5s": {"raise": 62, "fold": 38},
            "76s": {"raise": 55, "fold": 45},
            "22": {"call": 55, "fold": 40, "raise": 5},
            "72o": "black",
            "32o": "black",
        }
    )
    return expected


def _assert_consistent(summary, expected):
    non_black = sum(1 for action in expected.values() if action != "black")
    assert summary.correct + summary.half_credit + summary.wrong == summary.attempted
    assert summary.attempted + summary.unanswered == non_black
    assert sum(summary.buckets.values()) == summary.attempted


def test_empty_answers_are_all_unanswered():
    expected = _reference()
    summary = grade_range_submission(expected, {})
    _assert_consistent(summary, expected)
    assert summary.attempted == 0
    assert summary.unanswered == 167
    assert summary.accuracy == 0.0
    assert summary.by_action["black"].expected == 2
    assert summary.strengths == ()


def test_scores_each_answer_with_the_hand_scorer():
    expected = _reference()
    answers = {
        "AA": "raise",  # perfect
        "KK": "fold",  # miss
        "AQs": "fold",  # strong minority 0.25
        "A5s": "raise",  # moderate top 0.9
        "76s": "raise-fold",  # mixed, meaningfully mixed -> perfect
        "22": "raise",  # close minority under tiny floor -> 0.25
        "T2o": "fold",  # perfect
    }
    summary = grade_range_submission(expected, answers)
    _assert_consistent(summary, expected)

    assert summary.attempted == 7
    assert summary.correct == 3
    assert summary.half_credit == 3
    assert summary.wrong == 1
    assert summary.total_score == pytest.approx(1 + 0 + 0.25 + 0.9 + 1 + 0.25 + 1)
    assert summary.accuracy == pytest.approx(summary.total_score / 7)
    assert summary.buckets == {"perfect": 3, "good": 1, "partial": 2, "miss": 1}

    raise_stats = summary.by_action["raise"]
    assert raise_stats.expected == 6
    assert raise_stats.correct == 2
    assert raise_stats.half_credit == 2
    assert raise_stats.accuracy == pytest.approx((2 + 0.5 * 2) / 6)
    assert summary.by_action["call"].expected == 1
    assert summary.by_action["call"].half_credit == 1
    assert summary.by_action["shove"].expected == 0
    assert summary.by_action["shove"].accuracy == 1.0


def test_black_hands_are_invisible_to_scoring():
    expected = _reference()
    answers = {"72o": "raise", "32o": "mixed"}
    summary = grade_range_submission(expected, answers)
    assert summary.attempted == 0
    assert summary.correct == summary.half_credit == summary.wrong == 0
    assert summary.unanswered == 167
    assert "72o" not in summary.graded_hands
    assert all(diff.hand not in {"72o", "32o"} for diff in summary.diffs)


def test_none_and_blank_answers_count_as_unanswered():
    summary = grade_range_submission({"AA": "raise", "KK": "raise"}, {"AA": None, "KK": ""})
    assert summary.attempted == 0
    assert summary.unanswered == 2


def test_diffs_classify_mistakes():
    expected = _reference()
    answers = {"KK": "fold", "T2o": "raise", "A5s": "raise", "AA": "mixed", "22": "shove"}
    summary = grade_range_submission(expected, answers, position="BTN")
    by_hand = {diff.hand: diff for diff in summary.diffs}

    assert by_hand["KK"].mistake_type == "too_tight"
    assert by_hand["KK"].grade_bucket == "miss"
    assert by_hand["T2o"].mistake_type == "too_loose"
    assert by_hand["A5s"].mistake_type == "missed_mix"
    assert by_hand["A5s"].is_half_credit
    assert by_hand["A5s"].severity_score == 0.5
    assert by_hand["A5s"].expected_signature == "raise-fold"
    assert by_hand["AA"].mistake_type == "wrong_blend"
    assert by_hand["22"].mistake_type == "over_aggressive"
    assert by_hand["22"].expected_primary == "call"

    severities = [diff.severity_score for diff in summary.diffs]
    assert severities == sorted(severities, reverse=True)
    assert summary.top_leaks
    assert summary.priority_fixes
    assert len(summary.priority_fixes) <= 3


def test_notes_drive_why_and_severity():
    expected = {"AKo": "raise", "K9s": "raise"}
    notes = {
        "AKo": {"tags": ["core_open"], "robustness": "robust", "oneLiner": "Called value: dominates worse aces."},
        "K9s": {"tags": ["edge_open"]},
    }
    summary = grade_range_submission(expected, {"AKo": "fold", "K9s": "fold"}, notes=notes)
    by_hand = {diff.hand: diff for diff in summary.diffs}
    assert by_hand["AKo"].why == "Called value: dominates worse aces."
    assert by_hand["AKo"].severity_score == pytest.approx(3.5)
    assert by_hand["AKo"].severity == "high"
    assert by_hand["K9s"].severity_score == pytest.approx(1.0)
    assert "core_open" in by_hand["AKo"].tags
    assert summary.diffs[0].hand == "AKo"


def test_late_position_boosts_missed_raises():
    expected = {"98s": "raise", "T8s": "raise"}
    answers = {"98s": "fold", "T8s": "fold"}
    early = grade_range_submission(expected, answers, position="UTG")
    late = grade_range_submission(expected, answers, position="BTN")
    assert late.top_leaks[0].weight == pytest.approx(early.top_leaks[0].weight * 1.15)
    assert "BTN" in late.top_leaks[0].diagnosis


def test_leak_limits_are_respected():
    expected = {hand: "raise" for hand in ALL_HANDS}
    answers = {hand: "fold" for hand in ALL_HANDS}
    summary = grade_range_submission(expected, answers, max_leaks=2, max_examples_per_leak=3)
    assert len(summary.top_leaks) == 2
    assert all(len(leak.examples) <= 3 for leak in summary.top_leaks)


def test_custom_config_reaches_the_scorer():
    expected = {"A5s": {"raise": 62, "fold": 38}}
    default = grade_range_submission(expected, {"A5s": "mixed"})
    strict = grade_range_submission(expected, {"A5s": "mixed"}, config={"MIX_MIN": 0.5})
    assert default.correct == 1
    assert strict.wrong == 1


def test_premium_strength_reported():
    expected = {hand: "raise" for hand in ("AA", "KK", "QQ", "JJ", "AKs", "AKo", "AQs")}
    answers = dict.fromkeys(expected, "raise")
    summary = grade_range_submission(expected, answers)
    assert summary.accuracy == 1.0
    assert any("Premiums" in item for item in summary.strengths)


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_aggregate_invariants_hold_for_random_submissions(seed):
    rng = random.Random(seed)
    choices = ["raise", "call", "fold", "shove", "mixed", "raise-fold", "black", ""]
    expected: dict[str, object] = {}
    for hand in ALL_HANDS:
        roll = rng.random()
        if roll < 0.1:
            expected[hand] = "black"
        elif roll < 0.4:
            expected[hand] = {"raise": rng.randint(0, 100), "fold": rng.randint(0, 100), "shove": rng.randint(0, 30)}
        else:
            expected[hand] = rng.choice(["raise", "call", "fold", "shove"])
    answers = {hand: rng.choice(choices) for hand in ALL_HANDS if rng.random() < 0.7}

    summary = grade_range_submission(expected, answers)
    _assert_consistent(summary, expected)
    assert 0.0 <= summary.accuracy <= 1.0
    assert summary.by_action["black"].correct == 0


def test_infinite_weight_is_ignored_consistently():
    expected = {"AA": {"raise": float("inf"), "fold": 50}}
    fold = grade_range_submission(expected, {"AA": "fold"})
    assert fold.correct == 1
    assert fold.by_action["fold"].expected == 1

    raised = grade_range_submission(expected, {"AA": "raise"})
    diff = raised.diffs[0]
    assert diff.expected_primary == "fold"
    assert diff.expected_signature is None
    assert diff.grade_bucket == "miss"


@pytest.mark.parametrize("bad", [None, 7, ["raise"]])
def test_unusable_expected_action_is_skipped(bad):
    summary = grade_range_submission({"AA": bad, "KK": "raise"}, {"AA": "raise", "KK": "raise"})
    assert summary.attempted == 1
    assert summary.unanswered == 0
    assert summary.graded_hands == frozenset({"KK"})


def test_black_tally_is_not_scored():
    summary = grade_range_submission({"72o": "black", "AA": "raise"}, {"AA": "raise"})
    black = summary.by_action["black"]
    assert (black.expected, black.correct, black.half_credit) == (1, 0, 0)
    assert black.accuracy == 1.0
