"""
One end-to-end encoding run:

    transform -> input asset (+ upload) -> output asset -> job -> poll
    -> export (download or publish) -> teardown

Every remote resource the run creates is recorded on a RunResources and
deleted on every exit path, whether the run succeeded, the job failed, or
something raised along the way.
"""
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from azure.mgmt.media.models import JobState

from .assets import ensure_input_asset, provision_output_asset, upload_input_file
from .azure_clients import MediaAccount, get_media_account, get_publish_container
from .cleanup import RunResources, teardown
from .config import WorkflowConfig
from .exceptions import CleanupError, JobFailedError
from .export import download_output_asset, download_urls, publish_output_asset
from .jobs import state_value, submit_job, wait_for_job
from .naming import RunNames
from .polling import PollPolicy
from .transforms import provision_transform

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    names: RunNames
    job_state: str | None
    files: list[Path] = field(default_factory=list)
    published_urls: list[str] = field(default_factory=list)


def _export(account: MediaAccount, config: WorkflowConfig, names: RunNames, cancel_event, sleep) -> WorkflowResult:
    result = WorkflowResult(names=names, job_state=JobState.FINISHED.value)

    if config.export_mode == "publish":
        published = publish_output_asset(
            account,
            names.output_asset,
            get_publish_container(config),
            f"{config.publish_prefix}/{names.run_id}",
            sas_expiry_minutes=config.sas_expiry_minutes,
            poll_interval=config.poll_interval,
            cancel_event=cancel_event,
            sleep=sleep,
        )
        result.published_urls = [p.url for p in published]
        result.files = download_urls(published, Path(config.output_dir) / names.run_id, timeout=config.http_timeout)
    else:
        result.files = download_output_asset(
            account,
            names.output_asset,
            config.output_dir,
            sas_expiry_minutes=config.sas_expiry_minutes,
        )
    return result


def run_encoding_workflow(
    config: WorkflowConfig,
    source_path: str | Path,
    *,
    account: MediaAccount | None = None,
    names: RunNames | None = None,
    cancel_event: threading.Event | None = None,
    on_progress: Callable[[int], None] | None = None,
    sleep=None,
) -> WorkflowResult:
    """
    Encode source_path with a fresh transform and return what was exported.

    Raises JobFailedError when the job ends in Error/Canceled, the poll
    errors on timeout/cancel/unknown state, and any SDK error as-is. All
    of them are raised after teardown has been attempted. A teardown
    failure after an otherwise successful run raises CleanupError.
    """
    config.validate()
    account = account or get_media_account(config)
    names = names or RunNames.generate()
    resources = RunResources(names=names)
    logger.info("Starting run %s", names.run_id)

    try:
        resources.transform = provision_transform(account, names.transform, config.video_bitrate)
        # recorded before the upload so a failed upload still deletes the asset
        resources.input_asset = ensure_input_asset(account, names.input_asset, source_path)
        upload_input_file(account, names.input_asset, source_path, sas_expiry_minutes=config.sas_expiry_minutes)
        resources.output_asset = provision_output_asset(account, names.output_asset)

        logger.info("Executing transform...")
        resources.job = submit_job(account, names.transform, names.job, names.input_asset, names.output_asset)
        job = wait_for_job(
            account,
            names.transform,
            names.job,
            PollPolicy.from_config(config),
            cancel_event=cancel_event,
            on_progress=on_progress,
            sleep=sleep,
        )

        state = state_value(job.state)
        if state != JobState.FINISHED.value:
            raise JobFailedError(names.job, state)

        logger.info("Exporting results...")
        result = _export(account, config, names, cancel_event, sleep)
    except BaseException as e:
        logger.warning("Run %s failed (%s). Cleaning up...", names.run_id, e)
        try:
            teardown(account, resources)
        except CleanupError as cleanup_error:
            logger.error("Cleanup after failed run %s was incomplete: %s", names.run_id, cleanup_error)
        raise

    teardown(account, resources)
    logger.info("Run %s complete: %d file(s) exported", names.run_id, len(result.files))
    return result
