"""Tests for roster CSV import."""

import pytest
from faker import Faker
from tests.conftest import FOLLOWER, LEADER

from judging.roster import parse_roster
from judging.validation import ValidationError

SEED = 4242


def make_csv(rows: list[tuple[str, str, str]], header: str = "Name,Role,BibNumber") -> bytes:
    lines = [header] + [",".join(row) for row in rows]
    return ("\n".join(lines) + "\n").encode("utf-8")


class TestParseRoster:
    def setup_method(self):
        self.fake = Faker()
        Faker.seed(SEED)

    def test_groups_by_role_in_bib_order(self):
        rows = [
            (self.fake.name(), "Follower", "203"),
            (self.fake.name(), "Leader", "102"),
            (self.fake.name(), "Leader", "101"),
            (self.fake.name(), "Follower", "201"),
        ]
        roster = parse_roster(make_csv(rows))
        assert [c.bib_number for c in roster[LEADER]] == [101, 102]
        assert [c.bib_number for c in roster[FOLLOWER]] == [201, 203]
        assert roster[LEADER][0].name == rows[2][0]
        assert all(c.role == FOLLOWER for c in roster[FOLLOWER])

    def test_unique_ids(self):
        rows = [(self.fake.name(), "Leader", str(100 + i)) for i in range(20)]
        roster = parse_roster(make_csv(rows))
        assert len({c.id for c in roster[LEADER]}) == 20

    def test_skips_incomplete_and_unknown_roles(self):
        rows = [
            (self.fake.name(), "Leader", "101"),
            ("", "Leader", "102"),
            (self.fake.name(), "Switch", "103"),
            (self.fake.name(), "Follower", ""),
        ]
        roster = parse_roster(make_csv(rows))
        assert len(roster[LEADER]) == 1
        assert roster[FOLLOWER] == []

    def test_extra_columns_and_bom(self):
        content = b"\xef\xbb\xbf" + make_csv(
            [("Ada", "Leader", "7", "ada@example.com")],
            header="Name,Role,BibNumber,Email",
        )
        [competitor] = parse_roster(content)[LEADER]
        assert (competitor.name, competitor.bib_number) == ("Ada", 7)

    def test_missing_column(self):
        with pytest.raises(ValidationError, match="Missing column\\(s\\): BibNumber"):
            parse_roster(make_csv([("Ada", "Leader")], header="Name,Role"))

    def test_invalid_bib(self):
        rows = [("Ada", "Leader", "101"), ("Bo", "Follower", "twelve")]
        with pytest.raises(ValidationError, match="Invalid bib number 'twelve' on line 3"):
            parse_roster(make_csv(rows))

    def test_empty_file(self):
        with pytest.raises(ValidationError, match="Missing column"):
            parse_roster(b"")
