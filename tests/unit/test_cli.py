"""Tests for CLI commands."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from eventbridge_component.cli import cli, load_inputs
from eventbridge_component.clients import ClientFactory, Credentials
from eventbridge_component.exceptions import ValidationError
from eventbridge_component.models import PersistedState
from eventbridge_component.state_store import JsonFileStateStore
from tests.fixtures.moto import ACCOUNT_ID, archive_names, bus_names, make_boto3_client


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for var in ("EBC_INSTANCE", "EBC_STAGE", "EBC_STATE_DIR", "EBC_PLATFORM_ACCOUNT_ID"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def mocked_aws(mock_aws_services):
    """Run CLI commands against moto with fixed credentials."""
    credentials = Credentials("testing", "testing")
    with patch("eventbridge_component.cli.resolve_credentials", return_value=credentials):
        yield


def _state_args(tmp_path: Path) -> list[str]:
    return ["--instance", "orders", "--stage", "dev", "--state-dir", str(tmp_path)]


def _archive_inputs(tmp_path: Path) -> Path:
    path = tmp_path / "inputs.yaml"
    path.write_text("archive:\n  active: true\n  name: orders-archive\n")
    return path


class TestHelp:
    """Test CLI help output."""

    def test_cli_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "eventbridge-component event bus management CLI" in result.output

    def test_deploy_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["deploy", "--help"])
        assert result.exit_code == 0
        assert "--inputs" in result.output
        assert "--name" in result.output
        assert "--region" in result.output
        assert "--endpoint-url" in result.output
        assert "--state-dir" in result.output

    def test_metrics_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["metrics", "--help"])
        assert result.exit_code == 0
        assert "--range-start" in result.output
        assert "--range-end" in result.output


class TestDeployCommand:
    def test_deploy_from_options(self, runner: CliRunner, mocked_aws, tmp_path) -> None:
        result = runner.invoke(
            cli, ["deploy", *_state_args(tmp_path), "--name", "orders-bus"]
        )

        assert result.exit_code == 0, result.output
        assert "✓ Event bus deployed: orders-bus" in result.output
        assert f"arn:aws:events:us-east-1:{ACCOUNT_ID}:event-bus/orders-bus" in result.output
        state = JsonFileStateStore(tmp_path, "orders", "dev").load()
        assert state.name == "orders-bus"

    def test_deploy_from_inputs_file(self, runner: CliRunner, mocked_aws, tmp_path) -> None:
        inputs = tmp_path / "inputs.yaml"
        inputs.write_text(
            "name: orders-bus\n"
            "region: eu-west-1\n"
            "archive:\n"
            "  active: true\n"
            "  name: orders-archive\n"
            "  retentionDays: 14\n"
        )

        result = runner.invoke(
            cli, ["deploy", *_state_args(tmp_path), "--inputs", str(inputs)]
        )

        assert result.exit_code == 0, result.output
        assert "Archive ARN:" in result.output
        events_client = make_boto3_client("events", "eu-west-1")
        assert bus_names(events_client) == {"orders-bus"}
        archive = events_client.describe_archive(ArchiveName="orders-archive")
        assert archive["RetentionDays"] == 14

    def test_deploy_region_change_fails(self, runner: CliRunner, mocked_aws, tmp_path) -> None:
        JsonFileStateStore(tmp_path, "orders", "dev").save(
            PersistedState(name="orders-bus", region="us-east-1")
        )

        with patch.object(ClientFactory, "client") as client:
            result = runner.invoke(
                cli, ["deploy", *_state_args(tmp_path), "--region", "eu-west-1"]
            )

        assert result.exit_code == 1
        assert "✗ Deployment failed" in result.output
        assert "Changing the region" in result.output
        client.assert_not_called()

    def test_deploy_without_credentials(self, runner: CliRunner, tmp_path) -> None:
        with patch("eventbridge_component.cli.resolve_credentials", return_value=None):
            result = runner.invoke(cli, ["deploy", *_state_args(tmp_path)])

        assert result.exit_code == 1
        assert "Credentials not found" in result.output


class TestRemoveCommand:
    def test_remove(self, runner: CliRunner, mocked_aws, tmp_path) -> None:
        runner.invoke(
            cli,
            [
                "deploy",
                *_state_args(tmp_path),
                "--name",
                "orders-bus",
                "--inputs",
                str(_archive_inputs(tmp_path)),
            ],
        )

        result = runner.invoke(cli, ["remove", *_state_args(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "✓ Event bus removed" in result.output
        events_client = make_boto3_client("events")
        assert bus_names(events_client) == set()
        assert archive_names(events_client) == set()
        assert not (tmp_path / "orders-dev.json").exists()


class TestMetricsCommand:
    def test_metrics_json(self, runner: CliRunner, mocked_aws, tmp_path) -> None:
        runner.invoke(cli, ["deploy", *_state_args(tmp_path), "--name", "orders-bus"])

        result = runner.invoke(
            cli,
            [
                "metrics",
                *_state_args(tmp_path),
                "--range-start",
                "2024-01-01T00:00:00Z",
                "--range-end",
                "2024-01-01T01:00:00Z",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["period"] == 60
        assert data["rangeStart"] == "2024-01-01T00:00:00+00:00"

    def test_metrics_missing_bound(self, runner: CliRunner, mocked_aws, tmp_path) -> None:
        result = runner.invoke(
            cli, ["metrics", *_state_args(tmp_path), "--range-start", "2024-01-01T00:00:00Z"]
        )

        assert result.exit_code == 1
        assert "✗ Metrics failed" in result.output
        assert "rangeEnd" in result.output


class TestStateCommand:
    def test_no_state(self, runner: CliRunner, tmp_path) -> None:
        result = runner.invoke(cli, ["state", *_state_args(tmp_path)])
        assert result.exit_code == 0
        assert "No state found." in result.output

    def test_shows_state(self, runner: CliRunner, tmp_path) -> None:
        JsonFileStateStore(tmp_path, "orders", "dev").save(PersistedState(name="orders-bus"))

        result = runner.invoke(cli, ["state", *_state_args(tmp_path)])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"name": "orders-bus"}


class TestLoadInputs:
    def test_none(self) -> None:
        assert load_inputs(None) == {}

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "inputs.yaml"
        path.write_text("")
        assert load_inputs(path) == {}

    def test_json_is_yaml(self, tmp_path) -> None:
        path = tmp_path / "inputs.json"
        path.write_text('{"name": "orders-bus", "monitoring": false}')
        assert load_inputs(path) == {"name": "orders-bus", "monitoring": False}

    def test_not_a_mapping(self, tmp_path) -> None:
        path = tmp_path / "inputs.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValidationError, match="inputs"):
            load_inputs(path)
