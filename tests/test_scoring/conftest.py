"""Shared fixtures for classifier and tie tests."""

import pytest
from tests.conftest import make_scores


@pytest.fixture
def distinct_five():
    """Five distinct scores, no ties.

        A 95, B 90, C 80, D 70, E 60

    With yes=2, alternates=2: A B YES, C ALT1, D ALT2, E NO.
    """
    return make_scores({"A": 95, "B": 90, "C": 80, "D": 70, "E": 60})


@pytest.fixture
def tie_at_top_with_unscored():
    """Tie straddling the YES/ALT boundary plus one unscored competitor.

        A 90, B 90, C 80, D -

    With yes=1, alternates=1: A B rank 1 YES (tied), C rank 3 NO, D unranked.
    """
    return make_scores({"A": 90, "B": 90, "C": 80, "D": None})


@pytest.fixture
def mixed_ties():
    """Several tie groups of different sizes, input deliberately unsorted.

        A 50, B 70, C 70, D 90, E 70, F 40, G 40, H 90

    Sorted: D H (90) rank 1, B C E (70) rank 3, A (50) rank 6, F G (40) rank 7
    """
    return make_scores({
        "A": 50, "B": 70, "C": 70, "D": 90,
        "E": 70, "F": 40, "G": 40, "H": 90,
    })


@pytest.fixture
def decimal_scale():
    """Chief-judge style 0-10 scores with decimals.

        A 9.5, B 7.2, C 9.5, D 3.0
    """
    return make_scores({"A": 9.5, "B": 7.2, "C": 9.5, "D": 3.0})
