class EncoderError(Exception):
    """Base class for failures raised by the encoding workflow."""


class UnknownJobStateError(EncoderError, ValueError):
    """A job output reported a state the poller does not recognise."""

    def __init__(self, state):
        self.state = state
        super().__init__(f"Unrecognised state of job: {state}")


class PollTimeoutError(EncoderError):
    pass


class PollCancelledError(EncoderError):
    pass


class JobFailedError(EncoderError):
    """The job reached a terminal state other than Finished."""

    def __init__(self, job_name: str, state):
        self.job_name = job_name
        self.state = state
        super().__init__(f"Job {job_name} ended in state {state}")


class ExportError(EncoderError):
    pass


class CleanupError(EncoderError):
    """One or more teardown steps failed. Every step was still attempted."""

    def __init__(self, errors: list[tuple[str, BaseException]]):
        self.errors = errors
        detail = "; ".join(f"{what}: {exc}" for what, exc in errors)
        super().__init__(f"{len(errors)} cleanup step(s) failed: {detail}")
