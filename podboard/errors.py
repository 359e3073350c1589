class PodBoardError(Exception):
    """Base class for every error raised by the PodBoard core."""


class InvalidInputError(PodBoardError):
    """Empty or malformed user input."""


class OutOfRangeError(InvalidInputError):
    """A timestamp or time range falls outside the media timeline."""


class QuotaExceededError(PodBoardError):
    """The identity has used up its free processing trials."""

    def __init__(self, message: str, *, limit: int, used: int):
        super().__init__(message)
        self.limit = limit
        self.used = used


class NotFoundError(PodBoardError):
    """Unknown job, media, note or board id."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class PipelineStageError(PodBoardError):
    """A processing stage (external collaborator) failed."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage} failed: {message}")
        self.stage = stage
        self.reason = message


class JobCancelledError(PodBoardError):
    """The job was cancelled before it could complete."""

    def __init__(self, job_id: str):
        super().__init__("Cancelled")
        self.job_id = job_id
