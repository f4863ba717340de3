"""CLI entry point for spec-sync."""

import asyncio
import sys
from pathlib import Path
from typing import NoReturn

import click
import structlog
from pydantic import ValidationError

from spec_sync.config.settings import ActionContext, SyncSettings
from spec_sync.engine.orchestrator import SyncOrchestrator
from spec_sync.exceptions import ConfigurationError, SpecSyncError
from spec_sync.models.domain import SyncOutcome
from spec_sync.providers.factory import create_repository_host
from spec_sync.sync.mappings import resolve_mappings
from spec_sync.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

OUTCOME_MESSAGES = {
    SyncOutcome.NO_CHANGES: "No changes detected. Skipping further actions.",
    SyncOutcome.PUSH_SKIPPED: "No differences with remote branch '{branch}'. Skipping push.",
    SyncOutcome.PUSHED: "Changes pushed directly to branch '{branch}' because auto-merge is enabled.",
    SyncOutcome.PULL_REQUEST_CREATED: "Pull request opened for branch '{branch}'.",
    SyncOutcome.PULL_REQUEST_UPDATED: "Existing pull request for branch '{branch}' updated.",
}


def _in_actions() -> bool:
    try:
        return ActionContext().actions
    except ValidationError:
        return False


def _fail(message: str) -> NoReturn:
    """Report a failed run and exit non-zero."""
    click.echo(f"Error: {message}", err=True)
    if _in_actions():
        # Workflow command data must not contain raw newlines
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        click.echo(f"::error::{escaped}")
    sys.exit(1)


def _build_settings(workspace: Path | None, **overrides: object) -> SyncSettings:
    """Build settings from the environment, letting given flags win.

    Raises:
        ConfigurationError: If a value cannot be validated
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        context = ActionContext(workspace=workspace) if workspace is not None else ActionContext()
        return SyncSettings(context=context, **values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


@click.group()
@click.option("--log-level", default="INFO", envvar="INPUT_LOG_LEVEL", help="Logging level")
def cli(log_level: str) -> None:
    """spec-sync: Sync API specifications into a repository branch and pull request."""
    configure_logging(log_level)


@cli.command()
@click.option("--branch", help="Working branch to create or reuse [INPUT_BRANCH]")
@click.option("--repository", help="Target repository as owner/repo [INPUT_REPOSITORY]")
@click.option("--sources", help="YAML or JSON list of mappings [INPUT_SOURCES]")
@click.option(
    "--sources-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the mapping list from a file instead of --sources",
)
@click.option("--token", help="Token with write access [INPUT_TOKEN, GITHUB_TOKEN]")
@click.option("--auto-merge/--no-auto-merge", default=None, help="Push directly instead of opening a PR")
@click.option("--add-timestamp/--no-add-timestamp", default=None, help="Stamp PR bodies with the run time")
@click.option(
    "--update-from-source/--no-update-from-source",
    default=None,
    help="Run the spec generator in the workspace instead of copying mappings",
)
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    help="Source workspace root [GITHUB_WORKSPACE]",
)
@click.option("--base-branch", help="Base branch for mapping sync pull requests (default: main)")
@click.option("--clone-directory", help="Where the target is cloned, relative to the workspace")
def run(
    branch: str | None,
    repository: str | None,
    sources: str | None,
    sources_file: Path | None,
    token: str | None,
    auto_merge: bool | None,
    add_timestamp: bool | None,
    update_from_source: bool | None,
    workspace: Path | None,
    base_branch: str | None,
    clone_directory: str | None,
) -> None:
    """Sync mappings (or run the generator) and reconcile branch and pull request."""
    try:
        if sources_file is not None:
            sources = sources_file.read_text(encoding="utf-8")
        settings = _build_settings(
            workspace,
            branch=branch,
            repository=repository,
            sources=sources,
            token=token,
            auto_merge=auto_merge,
            add_timestamp=add_timestamp,
            update_from_source=update_from_source,
            base_branch=base_branch,
            clone_directory=clone_directory,
        )
        outcome = asyncio.run(_run(settings))
    except SpecSyncError as e:
        log.debug("run_error", exc_info=True)
        _fail(str(e))
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        log.error("run_unexpected", exc_info=True)
        _fail(f"Unexpected error: {e}")

    click.echo(OUTCOME_MESSAGES[outcome].format(branch=settings.branch))


@cli.command("check-sources")
@click.option("--sources", help="YAML or JSON list of mappings [INPUT_SOURCES]")
@click.option(
    "--sources-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the mapping list from a file instead of --sources",
)
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    help="Source workspace root [GITHUB_WORKSPACE]",
)
@click.option(
    "--target",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Target tree the destinations are listed relative to",
)
def check_sources(
    sources: str | None,
    sources_file: Path | None,
    workspace: Path | None,
    target: Path,
) -> None:
    """Parse the mapping list and print the files a sync would copy."""
    try:
        if sources_file is not None:
            sources = sources_file.read_text(encoding="utf-8")
        settings = _build_settings(workspace, sources=sources)
        target_root = target.resolve()
        instructions = resolve_mappings(settings.require_mappings(), settings.source_root, target_root)
    except SpecSyncError as e:
        _fail(str(e))

    for instruction in instructions:
        click.echo(f"{instruction.relative} -> {instruction.destination.relative_to(target_root).as_posix()}")
    click.echo(f"{len(instructions)} file(s) would be synced")


async def _run(settings: SyncSettings) -> SyncOutcome:
    """Create the host and run the orchestrator against it."""
    host = create_repository_host(settings)
    try:
        return await SyncOrchestrator(settings, host).run()
    finally:
        await host.disconnect()


if __name__ == "__main__":
    cli()
