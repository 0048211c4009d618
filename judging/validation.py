"""Setup validation for competitions and judging panels."""

from judging.config import Settings, settings as default_settings
from judging.models import Competition, CompetitionStatus, CompetitorRole


class ValidationError(ValueError):
    """Raised when a competition configuration is not usable.

    The message is meant for the person setting up the competition.
    Validation never changes the competition it inspects.
    """
    pass


_NEXT_STATUS = {
    CompetitionStatus.PENDING: CompetitionStatus.ACTIVE,
    CompetitionStatus.ACTIVE: CompetitionStatus.COMPLETED,
}


def transition_competition(competition: Competition, status: CompetitionStatus) -> None:
    """Move a competition one step along pending -> active -> completed."""
    if _NEXT_STATUS.get(competition.status) != status:
        raise ValidationError(
            f"Cannot move competition from {competition.status.value} to {status.value}"
        )
    competition.status = status


def validate_counts(competition: Competition, settings: Settings = default_settings) -> None:
    if not competition.name.strip():
        raise ValidationError("Please enter a competition name")
    if competition.type != "Prelim":
        raise ValidationError("Finals setup is not yet implemented")
    if min(competition.required_yes_count, competition.alternate_count,
           competition.advancing_count) < 0:
        raise ValidationError("Counts cannot be negative")
    if competition.required_yes_count > competition.advancing_count:
        raise ValidationError(
            "Required Yes count cannot be greater than the number of advancing competitors"
        )
    if not settings.min_alternates <= competition.alternate_count <= settings.max_alternates:
        raise ValidationError(
            f"Number of alternates must be between {settings.min_alternates} "
            f"and {settings.max_alternates}"
        )


def validate_judges(competition: Competition) -> None:
    """Check the panel: one chief judge and an odd number of scorers per role."""
    chief_judges = [j for j in competition.judges if j.is_chief_judge]
    regular_judges = competition.regular_judges

    if not chief_judges:
        raise ValidationError("Must have a chief judge")
    if len(chief_judges) > 1:
        raise ValidationError("Must have only one chief judge")
    if len(regular_judges) < 2:
        raise ValidationError("Must have at least 2 regular judges")

    ids = [j.id for j in competition.judges]
    if len(set(ids)) != len(ids):
        raise ValidationError("Judge ids must be unique")

    for judge in competition.judges:
        if not judge.roles:
            raise ValidationError(f"Judge {judge.name} must have at least one role assigned")

    for role in CompetitorRole:
        scoring = sum(1 for j in regular_judges if role in j.roles)
        if scoring == 0:
            raise ValidationError(f"At least one judge must score {role.value}s")
        if scoring % 2 == 0:
            raise ValidationError(f"Must have an odd number of scoring judges for {role.value}s")


def validate_competitors(competition: Competition) -> None:
    seen_ids: set[str] = set()
    for role in CompetitorRole:
        competitors = competition.get_competitors(role)
        if not competitors:
            raise ValidationError(f"Please upload competitor list ({role.value}s missing)")

        bibs: set[int] = set()
        for competitor in competitors:
            if competitor.role != role:
                raise ValidationError(
                    f"Competitor {competitor.name} is listed as {role.value} "
                    f"but has role {competitor.role.value}"
                )
            if competitor.id in seen_ids:
                raise ValidationError(f"Duplicate competitor id: {competitor.id}")
            if competitor.bib_number in bibs:
                raise ValidationError(
                    f"Duplicate bib number {competitor.bib_number} among {role.value}s"
                )
            seen_ids.add(competitor.id)
            bibs.add(competitor.bib_number)


def validate_competition(competition: Competition, settings: Settings = default_settings) -> None:
    """Validate a competition before it is saved.

    Raises:
        ValidationError: On the first problem found
    """
    validate_counts(competition, settings)
    validate_judges(competition)
    validate_competitors(competition)
