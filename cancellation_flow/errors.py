"""Error types shared by the assignment service, the gateway and the API."""


class CancellationFlowError(Exception):
    """Base class for cancellation flow errors."""


class InvalidIdentity(CancellationFlowError, ValueError):
    """user_id or subscription_id is missing or blank."""


class AssignmentStorageError(CancellationFlowError):
    """The variant could not be read or persisted.

    The flow must treat this as unavailable and never fall back to a
    default variant.
    """


class SubmissionFailure(CancellationFlowError):
    """A cancellation outcome could not be reported to the backend."""
