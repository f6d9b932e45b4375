"""Unit tests for answer/group matching and point computation."""
import pytest

from nadfeud.services.grouping_service import GroupSpec
from nadfeud.services.scoring_service import (
    compute_score_deltas,
    match_group,
    matches,
    normalize,
    round_points,
)


def _groups(*pairs):
    return [GroupSpec(group_text=label, count=0, percentage=pct) for label, pct in pairs]


class TestNormalize:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Cats", "cat"),
            ("  DOG  ", "dog"),
            ("glass", "glas"),
            ("s", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize(raw) == expected

    def test_only_one_trailing_s_is_removed(self):
        assert normalize("bosss") == "boss"


class TestMatches:
    def test_plural_and_case_are_ignored(self):
        assert matches("cats", "Cat")
        assert matches("CAT", "Cats")

    def test_containment_works_both_ways(self):
        assert matches("black cat", "Cat")
        assert matches("cat", "Black Cats")

    def test_unrelated_answer_does_not_match(self):
        assert not matches("dog", "Cats")

    def test_blank_answer_matches_nothing(self):
        assert not matches("   ", "Cats")
        assert not matches("s", "Cats")


class TestMatchGroup:
    def test_first_matching_group_in_order_wins(self):
        groups = _groups(("Black Cat", 30), ("Cat", 50))
        assert match_group("cat", groups).group_text == "Black Cat"

    def test_no_match_returns_none(self):
        assert match_group("fish", _groups(("Cat", 50), ("Dog", 50))) is None


class TestRoundPoints:
    @pytest.mark.parametrize(
        "percentage, points",
        [(66.67, 67), (33.33, 33), (12.5, 13), (0.5, 1), (0.49, 0), (100, 100), (0, 0)],
    )
    def test_half_up(self, percentage, points):
        assert round_points(percentage) == points


class TestComputeScoreDeltas:
    def test_pet_scenario(self):
        groups = _groups(("Cat", 66.67), ("Dog", 33.33))
        answers = [("u1", "cat"), ("u2", "cats"), ("u3", "dog")]
        assert compute_score_deltas(answers, groups) == {"u1": 67, "u2": 67, "u3": 33}

    def test_unmatched_and_zero_point_users_are_left_out(self):
        groups = _groups(("Cat", 99.6), ("Dog", 0.4))
        answers = [("u1", "cat"), ("u2", "dog"), ("u3", "parrot")]
        assert compute_score_deltas(answers, groups) == {"u1": 100}

    def test_points_add_up_per_answer_row(self):
        groups = _groups(("Cat", 40), ("Dog", 20))
        answers = [("u1", "cat"), ("u1", "dog")]
        assert compute_score_deltas(answers, groups) == {"u1": 60}

    def test_no_groups_means_no_points(self):
        assert compute_score_deltas([("u1", "cat")], []) == {}
