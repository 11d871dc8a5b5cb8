from django.core.exceptions import ObjectDoesNotExist, ValidationError


class PostulationNotFound(ObjectDoesNotExist):
    """Raised for missing postulations and for ones owned by someone else alike."""

    def __init__(self):
        super().__init__("Postulation not found or you are not allowed to edit it.")


class DuplicatePendingPostulation(ValidationError):
    def __init__(self):
        super().__init__(
            "You already have a pending postulation for this club. Edit it instead.",
            code="duplicate_pending",
        )


class PostulationLocked(ValidationError):
    MESSAGES = {
        "assigned": "This postulation can no longer be edited: you have already been "
        "assigned to one of its matches.",
        "window_closed": "This postulation can no longer be edited: one or more of its "
        "matches starts in less than {hours} hours or has already been played.",
    }

    def __init__(self, reason: str, hours: int = 12):
        self.reason = reason
        super().__init__(self.MESSAGES[reason].format(hours=hours), code=f"locked_{reason}")


class PostulationSaveError(Exception):
    """Storage failed while writing a postulation; the cause is only logged."""

    def __init__(self, message="The postulation could not be saved. Please try again."):
        super().__init__(message)
        self.message = message
