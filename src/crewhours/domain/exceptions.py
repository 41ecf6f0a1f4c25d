class CrewHoursError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(CrewHoursError):
    """Requested resource does not exist."""


class ConflictError(CrewHoursError):
    """Operation conflicts with existing state (e.g. a ledger row already claimed by another label)."""


class ValidationError(CrewHoursError):
    """Input rejected before any side effect."""


class EmptyExportError(CrewHoursError):
    """Time-clock export had no usable shift rows."""


class DirectoryResolutionError(CrewHoursError):
    """A crew-member name could not be resolved to a directory entry."""


class PersistenceError(CrewHoursError):
    """Unit of work failed and was rolled back."""


class AlertDispatchError(CrewHoursError):
    """Alert sink could not deliver a batch."""


class InvalidTransitionError(CrewHoursError):
    """Requested status change is not allowed from the current state."""
