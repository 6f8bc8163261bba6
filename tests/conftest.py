"""In-memory stand-ins for the Media Services management client and blob containers."""

import threading
from pathlib import Path
from types import SimpleNamespace
from urllib.parse import urlsplit

import pytest
from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError

from encoder.azure_clients import MediaAccount
from encoder.config import WorkflowConfig
from encoder.naming import RunNames

STORAGE_HOST = "https://storage.example"


def job_snapshot(job_state: str, *outputs: tuple[str, int | None]):
    """A job as returned by jobs.get: overall state plus (state, progress) per output."""
    return SimpleNamespace(
        state=job_state,
        outputs=[SimpleNamespace(state=s, progress=p) for s, p in outputs],
    )


# ---------------------------------------------------------------- blob storage


class FakeBlobStorage:
    """Containers keyed by name; each container maps blob name -> bytes."""

    def __init__(self):
        self.containers: dict[str, dict[str, bytes]] = {}
        self.opened_urls: list[str] = []
        # blob name -> list of statuses get_blob_properties reports after a copy starts
        self.copy_script: dict[str, list[str]] = {}

    def from_container_url(self, url: str) -> "FakeContainer":
        self.opened_urls.append(url)
        name = urlsplit(url).path.strip("/").split("/")[0]
        return FakeContainer(self, name, urlsplit(url).query)

    def blobs(self, container: str) -> dict[str, bytes]:
        return self.containers.setdefault(container, {})


class FakeContainer:
    def __init__(self, storage: FakeBlobStorage, name: str, query: str = ""):
        self.storage = storage
        self.name = name
        self.query = query

    def list_blobs(self):
        return [SimpleNamespace(name=n) for n in sorted(self.storage.blobs(self.name))]

    def get_blob_client(self, blob_name: str) -> "FakeBlob":
        return FakeBlob(self, blob_name)


class FakeBlob:
    def __init__(self, container: FakeContainer, name: str):
        self.container = container
        self.name = name
        self._copy_statuses: list[str] = []

    @property
    def url(self) -> str:
        url = f"{STORAGE_HOST}/{self.container.name}/{self.name}"
        return f"{url}?{self.container.query}" if self.container.query else url

    def _blobs(self):
        return self.container.storage.blobs(self.container.name)

    def upload_blob(self, data, overwrite=False):
        if self.name in self._blobs() and not overwrite:
            raise ResourceExistsError("blob exists")
        self._blobs()[self.name] = data.read() if hasattr(data, "read") else data

    def download_blob(self):
        data = self._blobs()[self.name]
        return SimpleNamespace(readinto=lambda f: f.write(data))

    def start_copy_from_url(self, source_url: str):
        path = urlsplit(source_url).path.strip("/")
        container, _, blob_name = path.partition("/")
        self._blobs()[self.name] = self.container.storage.blobs(container)[blob_name]
        self._copy_statuses = list(self.container.storage.copy_script.get(blob_name, ["success"]))
        status = self._copy_statuses.pop(0)
        return {"copy_status": status}

    def get_blob_properties(self):
        status = self._copy_statuses.pop(0) if self._copy_statuses else "success"
        return SimpleNamespace(copy=SimpleNamespace(status=status))


# ---------------------------------------------------------------- media services


class FakeAssets:
    def __init__(self, log: list):
        self.log = log
        self.items: dict[str, SimpleNamespace] = {}
        self.sas_requests: list = []
        self.fail_delete: dict[str, Exception] = {}
        self.fail_get: Exception | None = None
        self._lock = threading.Lock()

    def get(self, resource_group, account_name, asset_name):
        if self.fail_get is not None:
            raise self.fail_get
        if asset_name not in self.items:
            raise ResourceNotFoundError(f"Asset {asset_name} not found")
        return self.items[asset_name]

    def create_or_update(self, resource_group, account_name, asset_name, parameters):
        self.log.append(("create_asset", asset_name))
        asset = self.items.get(asset_name) or SimpleNamespace(name=asset_name, container=f"asset-{asset_name}")
        self.items[asset_name] = asset
        return asset

    def delete(self, resource_group, account_name, asset_name):
        with self._lock:
            self.log.append(("delete_asset", asset_name))
        if asset_name in self.fail_delete:
            raise self.fail_delete[asset_name]
        self.items.pop(asset_name, None)

    def list_container_sas(self, resource_group, account_name, asset_name, parameters):
        self.sas_requests.append((asset_name, parameters.permissions, parameters.expiry_time))
        container = self.items[asset_name].container
        return SimpleNamespace(asset_container_sas_urls=[f"{STORAGE_HOST}/{container}?sig=secret"])


class FakeTransforms:
    def __init__(self, log: list):
        self.log = log
        self.items: dict[str, object] = {}
        self.fail_delete: Exception | None = None

    def create_or_update(self, resource_group, account_name, transform_name, parameters):
        self.log.append(("create_transform", transform_name))
        self.items[transform_name] = parameters
        return SimpleNamespace(name=transform_name, outputs=parameters.outputs)

    def delete(self, resource_group, account_name, transform_name):
        self.log.append(("delete_transform", transform_name))
        if self.fail_delete is not None:
            raise self.fail_delete
        self.items.pop(transform_name, None)


class FakeJobs:
    """jobs.get walks through `script`, repeating the last snapshot once it runs out."""

    def __init__(self, log: list):
        self.log = log
        self.items: dict[tuple[str, str], object] = {}
        self.script: list = []
        self.get_calls = 0

    def create(self, resource_group, account_name, transform_name, job_name, parameters):
        self.log.append(("create_job", job_name))
        job = SimpleNamespace(
            name=job_name,
            state="Queued",
            input=parameters.input,
            outputs=parameters.outputs,
        )
        self.items[(transform_name, job_name)] = job
        return job

    def get(self, resource_group, account_name, transform_name, job_name):
        self.get_calls += 1
        index = min(self.get_calls, len(self.script)) - 1
        return self.script[index]

    def list(self, resource_group, account_name, transform_name):
        return [job for (t, _), job in self.items.items() if t == transform_name]

    def delete(self, resource_group, account_name, transform_name, job_name):
        self.log.append(("delete_job", job_name))
        self.items.pop((transform_name, job_name), None)


class FakeMediaServices:
    def __init__(self):
        self.log: list = []
        self.assets = FakeAssets(self.log)
        self.transforms = FakeTransforms(self.log)
        self.jobs = FakeJobs(self.log)


# ---------------------------------------------------------------- fixtures


@pytest.fixture
def storage(monkeypatch) -> FakeBlobStorage:
    fake = FakeBlobStorage()
    monkeypatch.setattr("encoder.azure_clients.ContainerClient", fake)
    return fake


@pytest.fixture
def media() -> FakeMediaServices:
    return FakeMediaServices()


@pytest.fixture
def account(media) -> MediaAccount:
    return MediaAccount(client=media, resource_group="rg", account_name="acct")


@pytest.fixture
def names() -> RunNames:
    return RunNames(run_id="0a1b2c3d-4e5f")


@pytest.fixture
def source_video(tmp_path) -> Path:
    path = tmp_path / "input.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42 fake video")
    return path


@pytest.fixture
def config(tmp_path) -> WorkflowConfig:
    return WorkflowConfig(
        subscription_id="00000000-0000-0000-0000-000000000000",
        resource_group="rg",
        account_name="acct",
        output_dir=tmp_path / "output",
        poll_interval=0.01,
    )


@pytest.fixture
def no_sleep():
    calls = []
    return lambda seconds: calls.append(seconds)
