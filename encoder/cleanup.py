import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable

from .azure_clients import MediaAccount
from .exceptions import CleanupError
from .jobs import list_jobs
from .naming import RunNames

logger = logging.getLogger(__name__)


@dataclass
class RunResources:
    """
    Remote resources acquired by one run. A handle stays None until the
    resource has actually been created, so teardown only touches what exists.
    """
    names: RunNames
    transform: Any = None
    job: Any = None
    input_asset: Any = None
    output_asset: Any = None


def _attempt(errors: list, what: str, fn: Callable[[], None]) -> None:
    try:
        fn()
    except Exception as e:
        logger.error("Failed %s: %s", what, e)
        errors.append((what, e))


def _delete_asset(account: MediaAccount, asset_name: str, label: str) -> None:
    logger.info("Deleting %s asset...", label)
    account.client.assets.delete(*account.scope, asset_name)


def delete_assets_in_parallel(account: MediaAccount, resources: RunResources) -> list[tuple[str, BaseException]]:
    """Delete input and output assets concurrently; both are joined and every failure returned."""
    targets = [
        (label, name)
        for label, name, handle in (
            ("input", resources.names.input_asset, resources.input_asset),
            ("output", resources.names.output_asset, resources.output_asset),
        )
        if handle is not None
    ]
    if not targets:
        return []

    errors = []
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="asset-delete") as pool:
        futures = {
            pool.submit(_delete_asset, account, name, label): f"deleting {label} asset {name}"
            for label, name in targets
        }
    # leaving the with-block waited for both
    for future, what in futures.items():
        exc = future.exception()
        if exc is not None:
            logger.error("Failed %s: %s", what, exc)
            errors.append((what, exc))
    return errors


def teardown(account: MediaAccount, resources: RunResources) -> None:
    """
    Delete everything the run created: job, then transform, then both assets
    in parallel. Missing handles are skipped. Each step runs even if an
    earlier one failed; all failures are raised together as CleanupError.
    """
    names = resources.names
    errors = []
    logger.info("Cleaning up...")

    if resources.job is not None:
        def delete_job():
            logger.info("Deleting job...")
            account.client.jobs.delete(*account.scope, names.transform, names.job)

        _attempt(errors, f"deleting job {names.job}", delete_job)

    if resources.transform is not None:
        def delete_stray_jobs():
            # a transform with jobs under it cannot be removed cleanly
            for job in list_jobs(account, names.transform):
                if job.name != names.job or resources.job is None:
                    logger.info("Deleting job %s...", job.name)
                    account.client.jobs.delete(*account.scope, names.transform, job.name)

        def delete_transform():
            logger.info("Deleting transform...")
            account.client.transforms.delete(*account.scope, names.transform)

        _attempt(errors, f"listing jobs under {names.transform}", delete_stray_jobs)
        _attempt(errors, f"deleting transform {names.transform}", delete_transform)

    errors.extend(delete_assets_in_parallel(account, resources))

    if errors:
        raise CleanupError(errors)
    logger.info("All resources deleted.")
