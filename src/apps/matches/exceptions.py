from django.core.exceptions import ValidationError


class AssignmentConflict(ValidationError):
    """The referee already holds an assignment at the same date and time."""

    def __init__(self, conflicting):
        self.conflicting = conflicting
        super().__init__(
            f"This referee is already assigned to '{conflicting.match.description}' "
            "at the same date and time.",
            code="assignment_conflict",
        )


class MatchSaveError(Exception):
    """Storage failed while writing match data; the cause is only logged."""

    def __init__(self, message="The change could not be saved. Please try again."):
        super().__init__(message)
        self.message = message
