"""Competitor roster import from CSV."""

import csv
import io
import logging
import uuid

from judging.models import Competitor, CompetitorRole
from judging.validation import ValidationError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Name", "Role", "BibNumber")


def parse_roster(content: bytes) -> dict[CompetitorRole, list[Competitor]]:
    """Parse a roster CSV into competitors grouped by role.

    Expected format (header row required, extra columns ignored):

        Name,Role,BibNumber
        Jordan Smith,Leader,101
        Sam Lee,Follower,201

    Rows missing a value or naming an unknown role are skipped. Each
    competitor gets a fresh uuid4 id. Competitors are returned in bib order.

    Raises:
        ValidationError: If the header is missing a column or a bib is not a number
    """
    text = content.decode("utf-8-sig", errors="replace")
    reader = csv.DictReader(io.StringIO(text))

    missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
    if missing:
        raise ValidationError(
            f"Error parsing CSV file. Missing column(s): {', '.join(missing)}"
        )

    roster: dict[CompetitorRole, list[Competitor]] = {role: [] for role in CompetitorRole}
    skipped = 0
    for line_number, row in enumerate(reader, start=2):
        name = (row.get("Name") or "").strip()
        role_name = (row.get("Role") or "").strip()
        bib = (row.get("BibNumber") or "").strip()
        if not name or not role_name or not bib:
            skipped += 1
            continue

        try:
            role = CompetitorRole(role_name)
        except ValueError:
            skipped += 1
            continue

        try:
            bib_number = int(bib)
        except ValueError:
            raise ValidationError(f"Invalid bib number {bib!r} on line {line_number}")

        roster[role].append(Competitor(
            id=str(uuid.uuid4()),
            name=name,
            role=role,
            bib_number=bib_number,
        ))

    if skipped:
        logger.info("Skipped %d incomplete or invalid roster rows", skipped)

    for competitors in roster.values():
        competitors.sort(key=lambda c: c.bib_number)
    return roster
