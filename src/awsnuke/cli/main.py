"""Main CLI entry point using Typer."""

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..aws.credentials import check_account_blocklist, get_account_alias, validate_credentials
from ..aws.session import create_session
from ..config import NukeConfig
from ..exceptions import AccountBlocklistedError, ConfigError, ScanError, SessionError
from ..models.nuke_run import NukeRun, RunStatus
from ..models.parameters import NukeParameters
from ..nuke import AuditStorage, ConsoleEventSink, MultiEventSink, Nuke, RecordingEventSink, SafetyChecker
from ..resources import get_listers, resource_type_names
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="aws-nuke",
    help="aws-nuke - Remove all resources from an AWS account",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[NukeConfig] = None


@app.callback()
def main(
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to config file (default: ~/.aws-nuke/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """aws-nuke - Remove all resources from an AWS account."""
    global config

    try:
        config = NukeConfig.load(config_path)
    except ConfigError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)

    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    console.print(f"aws-nuke version {__version__}")


@app.command("resource-types")
def resource_types():
    """List all resource types that can be nuked, in scan order."""
    for name in resource_type_names():
        console.print(name)


@app.command()
def run(
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    access_key_id: Optional[str] = typer.Option(
        None, "--access-key-id", envvar="AWS_ACCESS_KEY_ID", help="AWS access key ID"
    ),
    secret_access_key: Optional[str] = typer.Option(
        None, "--secret-access-key", envvar="AWS_SECRET_ACCESS_KEY", help="AWS secret access key"
    ),
    session_token: Optional[str] = typer.Option(
        None, "--session-token", envvar="AWS_SESSION_TOKEN", help="AWS session token for temporary credentials"
    ),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region (overrides config)"),
    no_dry_run: bool = typer.Option(False, "--no-dry-run", help="Actually delete resources"),
    no_retry: bool = typer.Option(False, "--no-retry", help="Do not retry failed resources"),
    no_wait: bool = typer.Option(False, "--no-wait", help="Do not wait for removals to complete"),
    max_retries: Optional[int] = typer.Option(
        None, "--max-retries", min=0, help="Give up after this many retry passes (default: retry forever)"
    ),
    target: Optional[List[str]] = typer.Option(None, "--target", "-t", help="Only nuke this resource type"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-e", help="Never nuke this resource type"),
    force: bool = typer.Option(False, "--force", help="Do not ask for confirmation"),
    audit: bool = typer.Option(True, "--audit/--no-audit", help="Write an audit log of the run"),
):
    """Remove all resources of an account.

    Runs in dry-run mode by default and only lists what would be removed.

    Examples:
        # See what would be removed
        aws-nuke run --profile sandbox

        # Remove everything except IAM users
        aws-nuke run --profile sandbox --no-dry-run --exclude IAMUser

        # Only remove EC2 instances, give up after 5 retries
        aws-nuke run --profile sandbox --no-dry-run --target EC2Instance --max-retries 5
    """
    parameters = NukeParameters(
        profile=profile,
        access_key_id=access_key_id if not profile else None,
        secret_access_key=secret_access_key if not profile else None,
        session_token=session_token if not profile else None,
        region=region,
        no_dry_run=no_dry_run,
        retry=not no_retry,
        wait=not no_wait,
        max_retries=max_retries,
        force=force,
        targets=target or [],
        excludes=exclude or [],
    )

    try:
        nuke_region = parameters.region or config.region
        session = create_session(parameters, nuke_region)
        identity = validate_credentials(session)
        account_id = identity["account_id"]
        check_account_blocklist(account_id, config.account_blocklist)

        listers = get_listers(
            session,
            targets=parameters.targets or config.targets,
            excludes=parameters.excludes + config.excludes,
        )

        console.print(
            f"\nNuking account [bold cyan]{account_id}[/bold cyan] in [bold cyan]{nuke_region}[/bold cyan] "
            f"({len(listers)} resource types)\n"
        )

        if parameters.no_dry_run and not parameters.force:
            _confirm_account(session, account_id)

        recorder = RecordingEventSink()
        nuke = Nuke(
            listers,
            event_sink=MultiEventSink([ConsoleEventSink(console), recorder]),
            dry_run=not parameters.no_dry_run,
            retry=parameters.retry,
            wait=parameters.wait,
            max_retries=parameters.max_retries,
            safety_checker=SafetyChecker(config.protection_rules),
            region=nuke_region,
            account_id=account_id,
            profile=parameters.profile,
        )
        result = nuke.run()

        _print_summary(result)

        if audit:
            audit_file = AuditStorage(config.audit_dir).log_run(result, recorder.events)
            console.print(f"\nAudit log written to: [cyan]{audit_file}[/cyan]")

        if result.status == RunStatus.PLANNED:
            console.print("\nThe above resources would be removed. Use --no-dry-run to really delete them.")

        if not result.succeeded:
            raise typer.Exit(code=3)

    except typer.Exit:
        # Re-raise Exit exceptions (normal exit codes)
        raise
    except (SessionError, AccountBlocklistedError, ValueError) as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)
    except ScanError as e:
        console.print(f"✗ Scan aborted: {e}", style="bold red")
        raise typer.Exit(code=2)
    except Exception as e:
        console.print(f"✗ Error during nuke: {e}", style="bold red")
        logger.exception("Error in run command")
        raise typer.Exit(code=2)


def _confirm_account(session, account_id: str) -> None:
    """Ask the operator to type the account alias (or ID) before deleting."""
    alias = get_account_alias(session) or account_id

    console.print(
        Panel(
            f"Do you really want to nuke the account with the ID [bold]{account_id}[/bold] "
            f"and the alias [bold]{alias}[/bold]?",
            title="[bold red]⚠ Destructive operation[/bold red]",
            border_style="red",
        )
    )
    answer = typer.prompt("Do you want to continue? Enter account alias to continue")
    if answer.strip() != alias:
        console.print("✗ Aborted: alias did not match", style="bold red")
        raise typer.Exit(code=1)


def _print_summary(result: NukeRun) -> None:
    table = Table(title="Nuke complete")
    table.add_column("Finished", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Retries", justify="right")
    table.add_column("Status")
    table.add_row(
        str(result.finished_count),
        str(result.failed_count),
        str(result.skipped_count),
        str(result.retry_passes),
        result.status.value,
    )
    console.print()
    console.print(table)


# ============================================================================
# Audit Commands
# ============================================================================

audit_app = typer.Typer(help="Inspect audit logs of previous runs")


@audit_app.command("list")
def audit_list(
    audit_dir: Optional[str] = typer.Option(None, "--audit-dir", help="Audit log directory"),
):
    """List previous runs."""
    storage = AuditStorage(audit_dir or config.audit_dir)
    runs = storage.query_runs()

    if not runs:
        console.print("No runs recorded yet.")
        return

    table = Table(title="Nuke runs")
    table.add_column("Run ID", style="cyan")
    table.add_column("Timestamp")
    table.add_column("Account")
    table.add_column("Region")
    table.add_column("Mode")
    table.add_column("Status")
    table.add_column("Finished", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Skipped", justify="right")

    for data in runs:
        run_data = data["run"]
        table.add_row(
            run_data["run_id"],
            run_data["timestamp"],
            str(run_data.get("account_id") or "-"),
            str(run_data.get("region") or "-"),
            run_data["mode"],
            run_data["status"],
            str(run_data["finished_count"]),
            str(run_data["failed_count"]),
            str(run_data["skipped_count"]),
        )

    console.print(table)


@audit_app.command("show")
def audit_show(
    run_id: str = typer.Argument(..., help="Run ID to show"),
    audit_dir: Optional[str] = typer.Option(None, "--audit-dir", help="Audit log directory"),
):
    """Show every event of a previous run."""
    storage = AuditStorage(audit_dir or config.audit_dir)
    data = storage.get_run(run_id)

    if data is None:
        console.print(f"✗ Run '{run_id}' not found", style="bold red")
        raise typer.Exit(code=1)

    run_data = data["run"]
    console.print(
        f"\nRun [bold cyan]{run_data['run_id']}[/bold cyan] ({run_data['mode']}, {run_data['status']}) "
        f"at {run_data['timestamp']}\n"
    )

    table = Table()
    table.add_column("Region")
    table.add_column("Type")
    table.add_column("Resource", style="cyan")
    table.add_column("Reason")
    table.add_column("Message")

    for event in data.get("events", []):
        table.add_row(
            event["region"],
            event["resource_type"],
            event["resource_id"],
            event["reason"],
            event["message"],
        )

    console.print(table)


app.add_typer(audit_app, name="audit")


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
