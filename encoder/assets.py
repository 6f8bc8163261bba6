import logging
from pathlib import Path

from azure.core.exceptions import ResourceNotFoundError
from azure.mgmt.media.models import Asset, AssetContainerPermission

from .azure_clients import MediaAccount, container_from_url, get_asset_container_url

logger = logging.getLogger(__name__)


def find_asset(account: MediaAccount, asset_name: str) -> Asset | None:
    """Return the asset, or None when the service reports it does not exist."""
    try:
        return account.client.assets.get(*account.scope, asset_name)
    except ResourceNotFoundError:
        return None


def provision_output_asset(account: MediaAccount, asset_name: str) -> Asset:
    """Create (or update) an empty asset used as the job's output sink."""
    logger.info("Creating output asset %s", asset_name)
    return account.client.assets.create_or_update(*account.scope, asset_name, Asset())


def upload_file(sas_url: str, file_path: Path) -> str:
    """
    Upload a local file into the container behind sas_url under its base
    filename, overwriting any blob of the same name. Returns the blob name.
    """
    container = container_from_url(sas_url)
    blob_name = file_path.name
    logger.info("Uploading media file %s...", blob_name)
    with open(file_path, "rb") as f:
        container.get_blob_client(blob_name).upload_blob(f, overwrite=True)
    logger.info("Upload complete")
    return blob_name


def ensure_input_asset(account: MediaAccount, asset_name: str, file_path: str | Path) -> Asset:
    """
    Make sure the named asset exists. An existing asset is reused (its blob
    will be overwritten); a missing one is created. Any error other than
    not-found propagates.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Source video not found: {file_path}")

    asset = find_asset(account, asset_name)
    if asset is not None:
        logger.warning("Asset %s already exists. It will be overwritten.", asset_name)
        return asset
    logger.info("Creating input asset %s", asset_name)
    return account.client.assets.create_or_update(*account.scope, asset_name, Asset())


def upload_input_file(
    account: MediaAccount,
    asset_name: str,
    file_path: str | Path,
    sas_expiry_minutes: int = 60,
) -> str:
    logger.info("Getting storage connection...")
    sas_url = get_asset_container_url(
        account,
        asset_name,
        AssetContainerPermission.READ_WRITE,
        expiry_minutes=sas_expiry_minutes,
    )
    return upload_file(sas_url, Path(file_path))


def provision_input_asset(
    account: MediaAccount,
    asset_name: str,
    file_path: str | Path,
    sas_expiry_minutes: int = 60,
) -> Asset:
    """Make sure the named asset exists and holds file_path."""
    asset = ensure_input_asset(account, asset_name, file_path)
    upload_input_file(account, asset_name, file_path, sas_expiry_minutes=sas_expiry_minutes)
    return asset
