from dataclasses import replace
from pathlib import Path

import pytest
from django.core.exceptions import ImproperlyConfigured

from encoder.config import WorkflowConfig
from encoder.polling import PollPolicy


@pytest.fixture
def azure_settings(settings, tmp_path):
    settings.AZURE_SUBSCRIPTION_ID = "sub-id"
    settings.AZURE_RESOURCE_GROUP = "streaming"
    settings.AZURE_MEDIA_SERVICES_ACCOUNT_NAME = "mediaaccount"
    settings.ENCODER_OUTPUT_DIR = tmp_path / "out"
    settings.ENCODER_POLL_MAX_SECONDS = None
    settings.ENCODER_POLL_MAX_ATTEMPTS = None
    settings.ENCODER_EXPORT_MODE = "download"
    return settings


class TestFromSettings:
    def test_reads_django_settings(self, azure_settings, tmp_path):
        config = WorkflowConfig.from_settings().validate()

        assert config.subscription_id == "sub-id"
        assert config.resource_group == "streaming"
        assert config.account_name == "mediaaccount"
        assert config.output_dir == tmp_path / "out"
        assert config.poll_max_seconds is None

    def test_overrides_win_and_none_is_ignored(self, azure_settings):
        config = WorkflowConfig.from_settings(output_dir=Path("/elsewhere"), poll_interval=None, poll_max_attempts=10)

        assert config.output_dir == Path("/elsewhere")
        assert config.poll_interval == azure_settings.ENCODER_POLL_INTERVAL_SECONDS
        assert config.poll_max_attempts == 10

    def test_poll_policy_follows_config(self, azure_settings):
        config = WorkflowConfig.from_settings(poll_interval=2.5, poll_max_seconds=600)
        assert PollPolicy.from_config(config) == PollPolicy(interval=2.5, max_seconds=600, max_attempts=None)


class TestValidate:
    @pytest.fixture
    def config(self, tmp_path):
        return WorkflowConfig(subscription_id="s", resource_group="rg", account_name="acct", output_dir=tmp_path)

    def test_valid_config_passes(self, config):
        assert config.validate() is config

    @pytest.mark.parametrize("field", ["subscription_id", "resource_group", "account_name"])
    def test_missing_azure_identifiers(self, config, field):
        with pytest.raises(ImproperlyConfigured, match="Missing required"):
            replace(config, **{field: "  "}).validate()

    def test_unknown_export_mode(self, config):
        with pytest.raises(ImproperlyConfigured, match="ENCODER_EXPORT_MODE"):
            replace(config, export_mode="email").validate()

    def test_publish_needs_container_url(self, config):
        with pytest.raises(ImproperlyConfigured, match="ENCODER_PUBLISH_CONTAINER_URL"):
            replace(config, export_mode="publish").validate()

    @pytest.mark.parametrize(
        "changes",
        [
            {"poll_interval": 0},
            {"poll_max_seconds": -1},
            {"poll_max_attempts": 0},
            {"video_bitrate": 0},
            {"sas_expiry_minutes": 0},
        ],
    )
    def test_rejects_non_positive_limits(self, config, changes):
        with pytest.raises(ImproperlyConfigured):
            replace(config, **changes).validate()
