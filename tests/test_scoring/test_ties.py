"""Tests for tie groups and tie warnings."""

import pytest
from tests.conftest import make_scores

from judging.classify import classify
from judging.ties import TieWarning, find_ties, is_meaningful_tie, significant_ties


class TestFindTies:
    def test_groups_and_ranges(self, mixed_ties):
        groups = find_ties(classify(mixed_ties, 3, 2))
        assert [(g.competitor_ids, g.raw_score, g.rank_range) for g in groups] == [
            (["D", "H"], 90, (1, 2)),
            (["B", "C", "E"], 70, (3, 5)),
            (["F", "G"], 40, (7, 8)),
        ]

    def test_no_ties(self, distinct_five):
        assert find_ties(classify(distinct_five, 2, 2)) == []

    def test_unscored_never_grouped(self):
        scores = classify(make_scores({"A": None, "B": None, "C": 5}), 1, 1)
        assert find_ties(scores) == []


class TestIsMeaningfulTie:
    """yes=3, alt=2: positions 1-3 YES, 4 ALT1, 5 ALT2, 6+ NO."""

    @pytest.mark.parametrize("rank_range,expected", [
        ((1, 2), False),   # both YES
        ((3, 4), True),    # YES / ALT1
        ((4, 5), True),    # ALT1 / ALT2
        ((5, 6), True),    # ALT2 / NO
        ((6, 8), False),   # all NO
        ((2, 7), True),    # YES through NO
    ])
    def test_regular_judge(self, rank_range, expected):
        assert is_meaningful_tie(rank_range, 3, 2) is expected

    @pytest.mark.parametrize("rank_range", [(1, 2), (6, 8), (3, 4)])
    def test_chief_judge_every_tie_matters(self, rank_range):
        assert is_meaningful_tie(rank_range, 3, 2, is_chief_judge=True) is True


class TestSignificantTies:
    def test_yes_alt_boundary(self):
        """A=B tied at rank 1 with yes=1: the tie spans YES and ALT1."""
        scores = classify(make_scores({"A": 90, "B": 90, "C": 80, "D": 70}), 1, 2)
        assert significant_ties(scores, 1, 2) == [
            TieWarning(["A", "B"], "yes_alt", ["YES", "ALT1"]),
        ]

    def test_yes_no_with_zero_alternates(self):
        scores = classify(make_scores({"A": 90, "B": 90, "C": 80}), 1, 0)
        [warning] = significant_ties(scores, 1, 0)
        assert warning.type == "yes_no"
        assert warning.affected_positions == ["YES", "NO"]

    def test_between_alts(self):
        scores = classify(make_scores({"A": 90, "B": 80, "C": 80, "D": 70}), 1, 3)
        [warning] = significant_ties(scores, 1, 3)
        assert warning.type == "between_alts"
        assert warning.affected_positions == ["ALT1", "ALT2"]

    def test_alt_no(self):
        scores = classify(make_scores({"A": 90, "B": 80, "C": 80}), 1, 1)
        [warning] = significant_ties(scores, 1, 1)
        assert warning.type == "alt_no"
        assert warning.affected_positions == ["ALT1", "NO"]

    def test_ties_inside_a_block_are_ignored(self, mixed_ties):
        """D/H inside YES and F/G inside NO; B/C/E spans YES, ALT1, ALT2."""
        warnings = significant_ties(classify(mixed_ties, 3, 2), 3, 2)
        assert [w.to_dict() for w in warnings] == [{
            "competitor_ids": ["B", "C", "E"],
            "type": "yes_alt",
            "affected_positions": ["YES", "ALT1", "ALT2"],
        }]

    def test_chief_judge_sees_every_tie(self, mixed_ties):
        warnings = significant_ties(classify(mixed_ties, 3, 2), 3, 2, is_chief_judge=True)
        assert [(w.competitor_ids, w.type, w.affected_positions) for w in warnings] == [
            (["D", "H"], "chief_judge", ["Rank 1"]),
            (["B", "C", "E"], "chief_judge", ["Rank 3"]),
            (["F", "G"], "chief_judge", ["Rank 7"]),
        ]

    def test_no_ties(self, distinct_five):
        assert significant_ties(classify(distinct_five, 2, 2), 2, 2) == []
