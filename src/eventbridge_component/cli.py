"""Command-line interface for eventbridge-component."""

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import boto3
import click
import yaml

from .clients import ClientFactory, Credentials
from .component import ComponentSettings, EventBridgeComponent
from .exceptions import EventBridgeComponentError, ValidationError
from .naming import (
    resolve_instance_name,
    resolve_platform_account_id,
    resolve_stage,
    resolve_state_dir,
)
from .state_store import JsonFileStateStore

T = TypeVar("T")


def instance_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that targets an instance."""
    options = [
        click.option(
            "--instance",
            help="Component instance name (default: $EBC_INSTANCE or 'eventbridge')",
        ),
        click.option("--stage", help="Deployment stage (default: $EBC_STAGE or 'dev')"),
        click.option(
            "--state-dir",
            help=(
                "Directory for persisted state "
                "(default: $EBC_STATE_DIR or .eventbridge-component)"
            ),
        ),
        click.option("--profile", help="AWS profile used to resolve credentials"),
        click.option(
            "--endpoint-url",
            help=(
                "AWS endpoint URL "
                "(e.g., http://localhost:4566 for LocalStack, or other AWS-compatible services)"
            ),
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_credentials(profile: str | None) -> Credentials | None:
    """Resolve credentials from the boto3 default chain or a named profile."""
    session = boto3.Session(profile_name=profile) if profile else boto3.Session()
    resolved = session.get_credentials()
    if resolved is None:
        return None
    frozen = resolved.get_frozen_credentials()
    return Credentials(
        access_key_id=frozen.access_key,
        secret_access_key=frozen.secret_key,
        session_token=frozen.token,
    )


def load_inputs(path: Path | None) -> dict[str, Any]:
    """Load a YAML (or JSON) inputs document."""
    if path is None:
        return {}
    data = yaml.safe_load(path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("inputs", str(path), "The inputs document must be a mapping.")
    return data


def _run(
    action: str,
    instance: str | None,
    stage: str | None,
    state_dir: str | None,
    profile: str | None,
    endpoint_url: str | None,
    operation: Callable[[EventBridgeComponent], Awaitable[T]],
) -> T:
    """Build the component, run one operation and map errors to exit code 1."""

    async def _main() -> T:
        instance_name = resolve_instance_name(instance)
        stage_name = resolve_stage(stage)
        settings = ComponentSettings(
            instance_name=instance_name,
            stage=stage_name,
            platform_account_id=resolve_platform_account_id(None),
        )
        store = JsonFileStateStore(resolve_state_dir(state_dir), instance_name, stage_name)
        async with ClientFactory(resolve_credentials(profile), endpoint_url) as factory:
            return await operation(EventBridgeComponent(factory, store, settings))

    try:
        return asyncio.run(_main())
    except EventBridgeComponentError as e:
        click.echo(f"✗ {action} failed: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="eventbridge-component")
@click.option("-v", "--verbose", is_flag=True, help="Log every AWS call made")
def cli(verbose: bool) -> None:
    """eventbridge-component event bus management CLI."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@instance_options
@click.option(
    "--inputs",
    "inputs_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML or JSON file with deploy inputs",
)
@click.option("--name", help="Event bus name (overrides inputs)")
@click.option("--region", help="AWS region (overrides inputs; default: us-east-1)")
def deploy(
    instance: str | None,
    stage: str | None,
    state_dir: str | None,
    profile: str | None,
    endpoint_url: str | None,
    inputs_path: Path | None,
    name: str | None,
    region: str | None,
) -> None:
    """Deploy or update the EventBridge event bus, archive and IAM roles."""
    try:
        inputs = load_inputs(inputs_path)
    except EventBridgeComponentError as e:
        click.echo(f"✗ Deployment failed: {e}", err=True)
        sys.exit(1)

    if name:
        inputs["name"] = name
    if region:
        inputs["region"] = region

    outputs = _run(
        "Deployment",
        instance,
        stage,
        state_dir,
        profile,
        endpoint_url,
        lambda component: component.deploy(inputs),
    )

    click.echo(f"✓ Event bus deployed: {outputs['name']}")
    click.echo(f"  ARN: {outputs['arn']}")
    if outputs.get("archiveArn"):
        click.echo(f"  Archive ARN: {outputs['archiveArn']}")


@cli.command()
@instance_options
def remove(
    instance: str | None,
    stage: str | None,
    state_dir: str | None,
    profile: str | None,
    endpoint_url: str | None,
) -> None:
    """Remove the event bus, its archive and the IAM roles it created."""
    _run(
        "Removal",
        instance,
        stage,
        state_dir,
        profile,
        endpoint_url,
        lambda component: component.remove(),
    )
    click.echo("✓ Event bus removed")


@cli.command()
@instance_options
@click.option("--range-start", help="Start of the range (ISO-8601)")
@click.option("--range-end", help="End of the range (ISO-8601)")
def metrics(
    instance: str | None,
    stage: str | None,
    state_dir: str | None,
    profile: str | None,
    endpoint_url: str | None,
    range_start: str | None,
    range_end: str | None,
) -> None:
    """Print EventBridge metrics of the deployed bus as JSON."""
    series = _run(
        "Metrics",
        instance,
        stage,
        state_dir,
        profile,
        endpoint_url,
        lambda component: component.metrics({"rangeStart": range_start, "rangeEnd": range_end}),
    )
    click.echo(json.dumps(series.to_dict(), indent=2))


@cli.command()
@click.option("--instance", help="Component instance name")
@click.option("--stage", help="Deployment stage")
@click.option("--state-dir", help="Directory for persisted state")
def state(instance: str | None, stage: str | None, state_dir: str | None) -> None:
    """Show the persisted state of an instance."""
    store = JsonFileStateStore(
        resolve_state_dir(state_dir), resolve_instance_name(instance), resolve_stage(stage)
    )
    current = store.load()
    if current.is_empty:
        click.echo("No state found.")
        return
    click.echo(json.dumps(current.to_dict(), indent=2, sort_keys=True))


if __name__ == "__main__":
    cli()
