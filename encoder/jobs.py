import logging
import threading
from typing import Callable, Iterable

from azure.mgmt.media.models import Job, JobInputAsset, JobOutputAsset, JobState

from .azure_clients import MediaAccount
from .exceptions import UnknownJobStateError
from .polling import PollPolicy, poll_until

logger = logging.getLogger(__name__)

COMPLETE = 100

# Compared by value: the SDK hands back JobState members or plain strings
TERMINAL_STATES = (JobState.FINISHED.value, JobState.CANCELED.value, JobState.ERROR.value)
WAITING_STATES = (JobState.QUEUED.value, JobState.SCHEDULED.value, JobState.CANCELING.value)


def state_value(state) -> str | None:
    return getattr(state, "value", state)


def is_terminal(state) -> bool:
    return state_value(state) in TERMINAL_STATES


def submit_job(account: MediaAccount, transform_name: str, job_name: str, input_asset: str, output_asset: str) -> Job:
    """Run transform_name against input_asset, writing to output_asset."""
    logger.info("Submitting job %s (%s -> %s)", job_name, input_asset, output_asset)
    return account.client.jobs.create(
        *account.scope,
        transform_name,
        job_name,
        Job(
            input=JobInputAsset(asset_name=input_asset),
            outputs=[JobOutputAsset(asset_name=output_asset)],
        ),
    )


def get_job(account: MediaAccount, transform_name: str, job_name: str) -> Job:
    return account.client.jobs.get(*account.scope, transform_name, job_name)


def list_jobs(account: MediaAccount, transform_name: str) -> list[Job]:
    return list(account.client.jobs.list(*account.scope, transform_name))


def output_progress(output) -> int:
    """
    Progress proxy for one job output.

    Processing reports its own progress; terminal states (including Error and
    Canceled) count as done; states still waiting to start count as 0.
    Anything else is fatal.
    """
    state = state_value(output.state)
    if state == JobState.PROCESSING.value:
        return output.progress or 0
    if state in TERMINAL_STATES:
        return COMPLETE
    if state in WAITING_STATES:
        return 0
    raise UnknownJobStateError(state)


def overall_progress(outputs: Iterable) -> int:
    """Slowest output wins. A job that reports no outputs yet is at 0."""
    return min((output_progress(o) for o in outputs), default=0)


def wait_for_job(
    account: MediaAccount,
    transform_name: str,
    job_name: str,
    policy: PollPolicy = PollPolicy(),
    *,
    cancel_event: threading.Event | None = None,
    on_progress: Callable[[int], None] | None = None,
    sleep=None,
) -> Job:
    """
    Poll the job until every output is terminal and return the final job.

    Done is not the same as succeeded: callers must check job.state for Finished.
    """
    last_reported = None

    def is_done(job: Job) -> bool:
        nonlocal last_reported
        progress = overall_progress(job.outputs or [])
        if progress != last_reported:
            logger.info("Job progress: %d%%", progress)
            if on_progress is not None:
                on_progress(progress)
            last_reported = progress
        return progress == COMPLETE

    job = poll_until(
        lambda: get_job(account, transform_name, job_name),
        is_done,
        policy,
        cancel_event=cancel_event,
        sleep=sleep,
        what=f"job {job_name}",
    )
    logger.info("Job %s ended in state %s", job_name, state_value(job.state))
    return job
