"""
holidaysync CLI Entry Point.

This module implements the command-line interface for holidaysync, a tool that
mines holiday definitions from the source files of the upstream `holidays`
library and stores them as one language-neutral JSON record per country.

The pipeline for each country runs in three stages:

1.  **Fetch**: The country's source file is fetched from the GitHub contents
    API through a rate-limited client (one request per `--interval` seconds).
2.  **Parse**: The file is decoded and validated, then holiday registration
    calls are extracted with a structural strategy and a line-pattern
    fallback, and converted to canonical definitions.
3.  **Persist**: The resulting record is written to `<output>/<CODE>.json`,
    unless `--dry-run` is given.

Usage:
    $ holidaysync --country US --country GB --output data/countries
    $ holidaysync --list
    $ holidaysync --validate --country DE

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal UI, colors, logging and progress visualization.
    - Inquirer: Interactive token prompt for `--configure`.
    - HTTPX: Async HTTP client for the GitHub API.
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import inquirer  # type: ignore
from inquirer.themes import GreenPassion  # type: ignore
from rich import print as pr
from rich.table import Table
import typer

from adapters.github import GitHubFetcher
from constants import DEFAULT_REQUEST_INTERVAL, DEFAULT_REQUEST_TIMEOUT
from core.config import get_config_file, load_token, save_config
from core.countries import filename_for
from core.exceptions import (
    FetchCancelledError,
    FetchError,
    FileIOError,
    RemoteAPIError,
    UnknownCountryError,
)
from core.file_io import country_record_path
from core.processing import (
    FILE_LEVEL_ERRORS,
    ParseResult,
    SyncReport,
    ValidationReport,
    parse_country_data,
    sync_countries,
    validate_countries,
)
from ui.progress_display import RichSyncProgressDisplay
from utils import setup_logging

app = typer.Typer()

DEFAULT_OUTPUT_DIR = Path("data") / "countries"


@app.command()
def main(
    country: Annotated[
        Optional[list[str]],
        typer.Option(
            "--country",
            "-C",
            help="ISO country code to sync. Repeat for several; omit to sync all.",
        ),
    ] = None,
    list_countries: Annotated[
        bool,
        typer.Option("--list", "-l", help="List the country codes available upstream."),
    ] = False,
    validate: Annotated[
        bool,
        typer.Option(
            "--validate",
            help="Compare freshly parsed data against the stored records.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Parse but do not write any record."),
    ] = False,
    compare: Annotated[
        bool,
        typer.Option(
            "--compare",
            help=(
                "Report how the structural and line-pattern strategies differ. "
                "No records are written."
            ),
        ),
    ] = False,
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            file_okay=False,
            dir_okay=True,
            help="Directory receiving the <CODE>.json records.",
        ),
    ] = DEFAULT_OUTPUT_DIR,
    token: Annotated[
        Optional[str],
        typer.Option(
            "--token",
            help="GitHub token. Defaults to GITHUB_TOKEN or the saved configuration.",
        ),
    ] = None,
    interval: Annotated[
        float,
        typer.Option(min=0, help="Seconds between two requests to the GitHub API."),
    ] = DEFAULT_REQUEST_INTERVAL,
    timeout: Annotated[
        float,
        typer.Option(min=1, help="HTTP timeout in seconds."),
    ] = DEFAULT_REQUEST_TIMEOUT,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
    configure: Annotated[
        bool,
        typer.Option("--configure", "-c", help="Save a GitHub token for later runs."),
    ] = False,
):
    """
    Sync holiday definitions from the upstream holidays library.

    Raises:
        typer.Exit: With code 1 on fetch, configuration or file errors, or
            when at least one country failed to sync.
    """
    if configure:
        edit_token_config()
        raise typer.Exit(0)

    setup_logging(verbose)
    codes = [code.strip().upper() for code in country or []]
    for code in codes:
        try:
            filename_for(code)
        except UnknownCountryError as e:
            print_unknown_country_err(e)

    fetcher = GitHubFetcher(
        token=token or load_token(),
        interval=interval,
        timeout=timeout,
    )

    try:
        if list_countries:
            asyncio.run(run_list(fetcher))
        elif validate:
            validation = asyncio.run(run_validate(fetcher, codes, output))
            if validation.failed:
                raise typer.Exit(code=1)
        else:
            report = asyncio.run(
                run_sync(fetcher, codes, None if dry_run else output, compare)
            )
            if compare:
                verb = "Compared"
            else:
                verb = "Parsed" if dry_run else "Synced"
            print_report(report, verb)
            if report.failed:
                raise typer.Exit(code=1)
    except RemoteAPIError as e:
        print_remote_api_err(e)
    except FetchCancelledError as e:
        pr("\n[yellow]Sync cancelled.[/yellow]")
        raise typer.Exit(code=1) from e
    except FetchError as e:
        print_fetch_err(e)
    except FileIOError as e:
        print_file_io_err(e)


async def run_list(fetcher: GitHubFetcher) -> None:
    async with fetcher:
        codes = await fetcher.list_country_codes()

    pr(f"\n[bold green]{len(codes)} countries available upstream:[/bold green]")
    pr(", ".join(codes))


async def run_sync(
    fetcher: GitHubFetcher,
    codes: list[str],
    output_dir: Optional[Path],
    compare: bool,
) -> SyncReport:
    """
    Sync the given countries, or every upstream country when `codes` is empty.

    With `compare`, the strategy comparison of each country is printed and
    no record is written.
    """
    async with fetcher:
        if not codes:
            codes = await fetcher.list_country_codes()

        if compare:
            report = SyncReport()
            for code in codes:
                try:
                    text = await fetcher.fetch_country_source(code)
                    result = parse_country_data(text, code, compare=True)
                except FILE_LEVEL_ERRORS as e:
                    report.failed[code] = getattr(e, "message", str(e))
                    continue
                print_comparison(code, result)
                report.succeeded.append(code)
            return report

        with RichSyncProgressDisplay() as display:
            return await sync_countries(
                fetcher, codes, output_dir, display=display
            )


async def run_validate(
    fetcher: GitHubFetcher, codes: list[str], output_dir: Path
) -> ValidationReport:
    """
    Check the token, then diff stored records against fresh upstream data.

    Countries without a stored record are reported and skipped.
    """
    async with fetcher:
        login = await fetcher.validate_token()
        pr(f"[green]Token valid[/green] (user: {login or 'unknown'})")

        if not codes:
            codes = await fetcher.list_country_codes()
        report = await validate_countries(fetcher, codes, output_dir)

    for code in report.missing:
        path = country_record_path(output_dir, code)
        pr(f"[yellow]{code}[/yellow]: no stored record at {path}")
    for code, differences in sorted(report.differences.items()):
        pr(f"\n[bold yellow]{code}[/bold yellow]: {len(differences)} difference(s)")
        for difference in differences:
            pr(f"  - {difference}")

    pr(f"\n[green]{len(report.unchanged)} record(s) up to date.[/green]")
    if report.failed:
        pr(f"[bold red]{len(report.failed)} failed:[/bold red]")
        for code, message in sorted(report.failed.items()):
            pr(f"  [red]{code}[/red]: {message}")
    return report


def print_comparison(code: str, result: ParseResult) -> None:
    comparison = result.comparison
    if comparison is None:
        return

    table = Table(title=f"{code}: {result.country_data.name}")
    table.add_column("Strategy")
    table.add_column("Definitions", justify="right")
    table.add_row("structural", str(comparison.structural_count))
    table.add_row("line_pattern", str(comparison.line_pattern_count))
    pr(table)
    pr(f"Chosen: [bold]{comparison.chosen_strategy}[/bold]")
    if comparison.structural_error:
        pr(f"[yellow]Structural error:[/yellow] {comparison.structural_error}")
    if comparison.differing_keys:
        pr(f"[yellow]Differing keys:[/yellow] {', '.join(comparison.differing_keys)}")


def print_report(report: SyncReport, verb: str) -> None:
    pr(f"\n[bold green]{verb} {len(report.succeeded)} countries.[/bold green]")
    for path in report.written:
        pr(f"  [dim]{path}[/dim]")
    if report.failed:
        pr(f"[bold red]{len(report.failed)} failed:[/bold red]")
        for code, message in sorted(report.failed.items()):
            pr(f"  [red]{code}[/red]: {message}")


def print_unknown_country_err(e: UnknownCountryError) -> None:
    """
    Displays the error for a country code outside the country table.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr(f"[red]Error:[/red] Unknown country code: [green]'{e.value}'[/green]")
    pr("Run with [bold]--list[/bold] to see the available countries.")
    raise typer.Exit(code=1) from e


def print_remote_api_err(e: RemoteAPIError) -> None:
    """
    Displays a user-friendly error message for GitHub API failures.

    Rate limiting and authentication failures get a specific hint.

    Args:
        e (RemoteAPIError): The exception carrying the HTTP status and body.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]GitHub API Error[/bold red]")
    pr(f"The API answered with status [yellow]{e.status_code}[/yellow].")
    if e.status_code == 401:
        pr("\n[yellow]Quick Fix:[/yellow] The token was rejected. Run with --configure.")
    elif e.status_code in (403, 429):
        pr(
            "\n[yellow]Quick Fix:[/yellow] You are probably rate limited. "
            "Configure a token or raise --interval."
        )
    if e.body:
        pr(f"\nResponse body: {e.body[:500]}")
    raise typer.Exit(code=1) from e


def print_fetch_err(e: FetchError) -> None:
    """
    Displays a user-friendly error message for network failures.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Network Error[/bold red]")
    pr(f"The app could not reach GitHub: {e.message}")
    pr("\n[yellow]Quick Fix:[/yellow] Check your connection or raise --timeout.")

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Diagnostics: {e.diagnostic_info}")
    raise typer.Exit(code=1) from e


def print_file_io_err(e: FileIOError) -> None:
    """
    Displays a user-friendly error message for file I/O operation failures.

    Args:
        e (FileIOError): The exception that was raised, containing error details
            and file path information.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]File I/O Error[/bold red]")
    pr(f"The app encountered an error while working with files: {e.message}")
    if e.file_path:
        pr(f"File path: [yellow]{e.file_path}[/yellow]")

    pr("\n[yellow]Quick Fix:[/yellow] Check file permissions and available disk space.")
    if e.original_exception:
        pr(f"\nTechnical details: {e.original_exception}")

    raise typer.Exit(code=1) from e


def edit_token_config() -> None:
    """
    Interactively prompts for a GitHub token with the saved one prepopulated,
    then saves it. On cancel or empty input, exits.
    """
    current_token = (get_config_file().get("github_token") or "").strip()

    pr("\n[bold green]Configure the GitHub token.[/bold green]\n")

    questions = [
        inquirer.Text("token", message="Enter GitHub token", default=current_token),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())

    if not answers:
        raise typer.Exit(code=1)

    token = (answers.get("token") or "").strip()
    if not token:
        pr("\n[bold][red]Error:[/bold] A token is required.")
        raise typer.Exit(code=1)

    try:
        save_config(token)
    except FileIOError as e:
        print_file_io_err(e)
    except OSError as e:
        pr("[red]Error:[/red] Could not save config.")
        pr(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=1) from e

    pr("[green]Config saved.[/green]\n")


if __name__ == "__main__":
    app()
