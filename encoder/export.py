"""
Getting encoder output off the output asset.

Two modes:
  download  - read the asset container directly into <output_dir>/<asset name>/
  publish   - server-side copy every blob into the published container under
              <prefix>/<run id>/, then fetch the copies over plain HTTP into
              <output_dir>/<run id>/

Both use a read-only SAS URL that expires after sas_expiry_minutes and is
never renewed.
"""
import logging
import threading
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import requests
from azure.mgmt.media.models import AssetContainerPermission
from azure.storage.blob import ContainerClient

from .azure_clients import MediaAccount, container_from_url, get_asset_container_url
from .exceptions import ExportError
from .polling import PollPolicy, poll_until

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class PublishedBlob:
    name: str   # path relative to the asset container, "/"-separated
    url: str    # SAS URL of the published copy


def local_path_for(root: Path, remote_name: str) -> Path:
    """
    Map a "/"-separated blob name onto a path under root using the host's
    separator. Names that would land outside root are rejected.
    """
    remote = PurePosixPath(remote_name)
    parts = [p for p in remote.parts if p not in ("", ".")]
    if remote.is_absolute() or not parts or ".." in parts:
        raise ExportError(f"Refusing to write blob {remote_name!r} outside {root}")
    return Path(root).joinpath(*parts)


def _read_container(account: MediaAccount, asset_name: str, sas_expiry_minutes: int) -> ContainerClient:
    sas_url = get_asset_container_url(
        account,
        asset_name,
        AssetContainerPermission.READ,
        expiry_minutes=sas_expiry_minutes,
    )
    return container_from_url(sas_url)


def download_output_asset(
    account: MediaAccount,
    asset_name: str,
    output_dir: str | Path,
    sas_expiry_minutes: int = 60,
) -> list[Path]:
    """Download every blob of the asset into <output_dir>/<asset_name>/. Returns local paths."""
    container = _read_container(account, asset_name, sas_expiry_minutes)

    target = Path(output_dir) / asset_name
    target.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading results to %s", target)

    files = []
    for blob in container.list_blobs():
        dest = local_path_for(target, blob.name)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with open(dest, "wb") as f:
            container.get_blob_client(blob.name).download_blob().readinto(f)
        files.append(dest)

    logger.info("Download complete. %d file(s)", len(files))
    return files


def _copy_status(props) -> str | None:
    copy = getattr(props, "copy", None)
    return getattr(copy, "status", None)


def publish_output_asset(
    account: MediaAccount,
    asset_name: str,
    publish_container: ContainerClient,
    destination_prefix: str,
    sas_expiry_minutes: int = 60,
    poll_interval: float = 1.0,
    *,
    cancel_event: threading.Event | None = None,
    sleep=None,
) -> list[PublishedBlob]:
    """
    Server-side copy each blob of the asset into publish_container under
    destination_prefix, one at a time, waiting for each copy to finish.
    """
    source = _read_container(account, asset_name, sas_expiry_minutes)
    # the source SAS stops working after this, so no copy may outlive it
    copy_policy = PollPolicy(interval=poll_interval, max_seconds=sas_expiry_minutes * 60)

    published = []
    for blob in source.list_blobs():
        dest_name = f"{destination_prefix.strip('/')}/{blob.name}".lstrip("/")
        dest = publish_container.get_blob_client(dest_name)
        logger.info("Copying %s to %s", blob.name, dest_name)

        result = dest.start_copy_from_url(source.get_blob_client(blob.name).url)
        status = (result or {}).get("copy_status")
        if status != "success":
            props = poll_until(
                dest.get_blob_properties,
                lambda p: _copy_status(p) != "pending",
                copy_policy,
                cancel_event=cancel_event,
                sleep=sleep,
                what=f"copy of {blob.name}",
            )
            status = _copy_status(props)
        if status != "success":
            raise ExportError(f"Copy of {blob.name} to {dest_name} ended with status {status}")

        published.append(PublishedBlob(name=blob.name, url=dest.url))

    logger.info("Published %d file(s) under %s", len(published), destination_prefix)
    return published


def download_urls(blobs: list[PublishedBlob], target_dir: str | Path, timeout: int = 60) -> list[Path]:
    """HTTP GET each published blob into target_dir, recreating its folder structure."""
    target = Path(target_dir)
    target.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading results to %s", target)

    files = []
    with requests.Session() as session:
        for blob in blobs:
            dest = local_path_for(target, blob.name)
            dest.parent.mkdir(parents=True, exist_ok=True)
            with session.get(blob.url, stream=True, timeout=timeout) as resp:
                resp.raise_for_status()
                with open(dest, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
            files.append(dest)

    logger.info("Download complete. %d file(s)", len(files))
    return files
