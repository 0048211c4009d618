"""Shared fixtures for store backend tests."""

import pytest
from tests.conftest import FOLLOWER, LEADER, make_competition, make_sheet


@pytest.fixture
def competition():
    return make_competition(leaders=["L1", "L2"], followers=["F1"])


@pytest.fixture
def sheets():
    """Three sheets across two competitions.

        comp-1  J2  Leader    submitted
        comp-1  J2  Follower  draft
        comp-2  J3  Leader    submitted
    """
    return [
        make_sheet("J2", LEADER, {"L1": 1, "L2": 2}),
        make_sheet("J2", FOLLOWER, {"F1": None}, submitted=False),
        make_sheet("J3", LEADER, {"L1": 2, "L2": 1}, competition_id="comp-2"),
    ]
