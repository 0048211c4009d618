"""Create a sample prelim competition in a JSON store file.

Generates competitors and judges with fake names using faker with a fixed
seed, so the same sample comes out every time. Optionally has every judge
score and submit their sheets through a judging session, which gives the
results endpoint something to show.

Usage:
    python scripts/make_sample_competition.py
    python scripts/make_sample_competition.py -o data/sample.json --leaders 12 --followers 10
    python scripts/make_sample_competition.py --with-scores
"""

import argparse
import random
from pathlib import Path

from faker import Faker

from judging.config import configure_logging
from judging.models import Competition, Competitor, CompetitorRole, Judge
from judging.session import JudgingSession
from judging.stores.json_file import JsonFileStore
from judging.validation import validate_competition

DEFAULT_OUTPUT = Path(__file__).parent.parent / "data" / "judging.json"

SEED = 20250301


def make_competitors(fake: Faker, role: CompetitorRole, count: int, first_bib: int) -> list[Competitor]:
    prefix = "L" if role == CompetitorRole.LEADER else "F"
    return [
        Competitor(
            id=f"{prefix}{i + 1}",
            name=fake.name(),
            role=role,
            bib_number=first_bib + i,
        )
        for i in range(count)
    ]


def make_competition(num_leaders: int, num_followers: int, seed: int) -> Competition:
    """Build a sample competition: one chief judge and three regular judges."""
    fake = Faker(["en_US", "en_GB", "de_DE", "fr_FR"])
    Faker.seed(seed)

    both_roles = [CompetitorRole.LEADER, CompetitorRole.FOLLOWER]
    judges = [Judge(id="J1", name=fake.name(), roles=both_roles, is_chief_judge=True)]
    judges += [
        Judge(id=f"J{i}", name=fake.name(), roles=list(both_roles))
        for i in range(2, 5)
    ]

    return Competition(
        id="sample-comp-1",
        name="Sample Novice Prelims",
        date=fake.date_this_year().isoformat(),
        judges=judges,
        competitors={
            CompetitorRole.LEADER: make_competitors(fake, CompetitorRole.LEADER, num_leaders, 101),
            CompetitorRole.FOLLOWER: make_competitors(fake, CompetitorRole.FOLLOWER, num_followers, 201),
        },
        required_yes_count=3,
        alternate_count=2,
        advancing_count=5,
    )


def score_all_judges(store: JsonFileStore, competition: Competition, seed: int) -> None:
    """Have every judge score every competitor 0-100 and submit."""
    rng = random.Random(seed)
    for judge in competition.judges:
        session = JudgingSession(store, competition, judge.id)
        session.load()
        for role in judge.roles:
            if role != session.current_role and not judge.is_chief_judge:
                session.switch_role(role)
            for competitor in competition.get_competitors(role):
                session.set_score(competitor.id, rng.randint(0, 100))
            if not judge.is_chief_judge:
                report = session.submit()
                print(f"  {judge.name}: {role.value}s submitted (saved={report.ok})")
        if judge.is_chief_judge:
            report = session.submit()
            print(f"  {judge.name} (chief): submitted (saved={report.ok})")


def main():
    parser = argparse.ArgumentParser(
        description="Create a sample prelim competition")
    parser.add_argument("-o", "--output", default=str(DEFAULT_OUTPUT),
                        help=f"Store file path (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--leaders", type=int, default=10)
    parser.add_argument("--followers", type=int, default=9)
    parser.add_argument("--with-scores", action="store_true",
                        help="Score and submit every judge's sheets")
    args = parser.parse_args()

    configure_logging("WARNING")

    competition = make_competition(args.leaders, args.followers, SEED)
    validate_competition(competition)

    store = JsonFileStore(args.output)
    store.delete_competition(competition.id)
    store.save_competition(competition)
    print(f"Created {competition.name!r} with "
          f"{len(competition.competitors[CompetitorRole.LEADER])} leaders and "
          f"{len(competition.competitors[CompetitorRole.FOLLOWER])} followers")

    if args.with_scores:
        score_all_judges(store, competition, SEED)

    print(f"Written to {args.output}")


if __name__ == "__main__":
    main()
