from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from azure.identity import DefaultAzureCredential
from azure.mgmt.media import AzureMediaServices
from azure.mgmt.media.models import AssetContainerPermission, ListContainerSasInput
from azure.storage.blob import ContainerClient

from .config import WorkflowConfig
from .exceptions import EncoderError


@dataclass(frozen=True)
class MediaAccount:
    """
    Typed handle to one Media Services account: the management client plus
    the (resource group, account name) pair every call is scoped to.
    """
    client: AzureMediaServices
    resource_group: str
    account_name: str

    @property
    def scope(self) -> tuple[str, str]:
        return self.resource_group, self.account_name


def get_credential(interactive: bool = False) -> DefaultAzureCredential:
    """
    Env vars, managed identity, Azure CLI login, etc. The interactive browser
    prompt is only tried when explicitly enabled (never on a worker).
    """
    return DefaultAzureCredential(exclude_interactive_browser_credential=not interactive)


def get_media_account(config: WorkflowConfig) -> MediaAccount:
    credential = get_credential(config.interactive_login)
    client = AzureMediaServices(credential, config.subscription_id)
    return MediaAccount(
        client=client,
        resource_group=config.resource_group,
        account_name=config.account_name,
    )


def get_asset_container_url(
    account: MediaAccount,
    asset_name: str,
    permissions: AssetContainerPermission,
    expiry_minutes: int = 60,
) -> str:
    """
    Short-lived SAS URL for the storage container behind an asset.

    Nothing renews it: every transfer using the URL must finish before it expires.
    """
    expiry = datetime.now(timezone.utc) + timedelta(minutes=expiry_minutes)
    sas = account.client.assets.list_container_sas(
        *account.scope,
        asset_name,
        ListContainerSasInput(permissions=permissions, expiry_time=expiry),
    )
    urls = sas.asset_container_sas_urls or []
    if not urls:
        raise EncoderError(f"No container SAS URL returned for asset {asset_name}")
    return urls[0]


def container_from_url(sas_url: str) -> ContainerClient:
    return ContainerClient.from_container_url(sas_url)


def get_publish_container(config: WorkflowConfig) -> ContainerClient:
    """
    Container that receives published copies. Configured as a SAS URL with
    read+write(+create) rights so the copied blobs can be fetched over plain HTTP.
    """
    return container_from_url(config.publish_container_url)
