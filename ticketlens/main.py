"""CLI entrypoint for ticketlens."""

import os
import sys

import click
from dotenv import load_dotenv
from googleapiclient.errors import HttpError

from ticketlens.analytics import build_records, calculate_kpis
from ticketlens.export import export_kpis_to_json, export_records_to_csv
from ticketlens.fetcher import ThreadCache, fetch_labels, fetch_threads
from ticketlens.models import ConversationRecord
from ticketlens.ui.cli import (
    confirm_action,
    create_progress,
    print_disordered,
    print_error,
    print_header,
    print_info,
    print_kpi_summary,
    print_monthly_table,
    print_sector_table,
    print_sender_table,
    print_success,
    print_warning,
    setup_logging,
)

# Load environment variables
load_dotenv()


def load_records(cache: ThreadCache) -> list[ConversationRecord]:
    """Build thread records from cached threads and labels."""
    return build_records(cache.get_conversations(), cache.get_cached_labels())


def _fetch_all(cache: ThreadCache) -> bool:
    """Fetch labels and threads into the cache. Returns False on failure."""
    print_info("Fetching labels...")
    try:
        labels = fetch_labels(cache=cache, use_cache=False)
    except FileNotFoundError as e:
        print_error(str(e))
        return False
    except HttpError as e:
        print_error(f"Failed to fetch labels: {e}")
        return False
    print_success(f"Fetched {len(labels)} labels")

    print_info("Fetching threads (this can take a while on large mailboxes)...")
    with create_progress() as progress:
        task = progress.add_task("Fetching...", total=100)

        def update_progress(current: int, total: int):
            pct = (current / total * 100) if total > 0 else 0
            progress.update(task, completed=pct)

        try:
            threads = fetch_threads(
                cache=cache,
                use_cache=False,
                progress_callback=update_progress,
            )
            progress.update(task, completed=100)
        except HttpError as e:
            print_error(f"Failed to fetch threads: {e}")
            return False

    print_success(f"Fetched {len(threads)} threads")
    return True


def _export(records: list[ConversationRecord], output: str, csv_output: str) -> bool:
    report = calculate_kpis(records)
    try:
        json_path = export_kpis_to_json(report, output)
        csv_path = export_records_to_csv(records, csv_output)
    except OSError as e:
        print_error(f"Export failed: {e}")
        return False

    print_success(f"KPI report written to {json_path}")
    print_success(f"Thread table written to {csv_path}")
    print_disordered(report)
    return True


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--log-level",
    default=lambda: os.getenv("LOG_LEVEL", "WARNING"),
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity",
)
def cli(log_level: str):
    """ticketlens - support mailbox KPIs from Gmail threads."""
    setup_logging(log_level)


@cli.command()
def ui():
    """Launch the Streamlit dashboard."""
    import subprocess

    app_path = os.path.join(os.path.dirname(__file__), "app.py")
    subprocess.run([sys.executable, "-m", "streamlit", "run", app_path])


@cli.command()
@click.option("--force", is_flag=True, help="Force refresh even if cache is fresh")
def fetch(force: bool):
    """Fetch labels and threads from Gmail."""
    print_header("Fetching Support Threads")

    cache = ThreadCache()

    if cache.is_fresh() and not force:
        count = cache.get_thread_count()
        print_info(f"Cache is fresh with {count} threads. Use --force to refresh.")
        return

    _fetch_all(cache)


@cli.command()
@click.option("--senders", default=10, help="Number of top senders to show")
def report(senders: int):
    """Show KPIs for the cached threads."""
    print_header("ticketlens - Support KPIs")

    cache = ThreadCache()

    if not cache.is_fresh(max_age_hours=24):
        print_warning("Cache is stale. Run 'ticketlens fetch' to update.")

    records = load_records(cache)

    if not records:
        print_error("No threads found. Run 'ticketlens fetch' first.")
        return

    kpis = calculate_kpis(records)

    print_kpi_summary(kpis)
    click.echo()
    print_sector_table(kpis)
    click.echo()
    print_sender_table(kpis, limit=senders)
    click.echo()
    print_monthly_table(kpis)
    print_disordered(kpis)


@cli.command()
@click.option("--output", "-o", default="results.json", help="KPI report JSON path")
@click.option("--csv", "csv_output", default="threads.csv", help="Thread table CSV path")
def export(output: str, csv_output: str):
    """Export the KPI report (JSON) and thread table (CSV)."""
    print_header("Exporting KPIs")

    records = load_records(ThreadCache())

    if not records:
        print_error("No threads found. Run 'ticketlens fetch' first.")
        return

    print_info(f"Processing {len(records)} threads...")
    _export(records, output, csv_output)


@cli.command()
@click.option("--output", "-o", default="results.json", help="KPI report JSON path")
@click.option("--csv", "csv_output", default="threads.csv", help="Thread table CSV path")
def run(output: str, csv_output: str):
    """Fetch fresh data, then export the KPI report and thread table."""
    print_header("ticketlens - Full Run")

    cache = ThreadCache()
    if not _fetch_all(cache):
        sys.exit(1)

    records = load_records(cache)
    print_info(f"Processing {len(records)} threads...")
    if not _export(records, output, csv_output):
        sys.exit(1)


@cli.command()
def auth():
    """Authenticate with Gmail (or re-authenticate)."""
    print_header("Gmail Authentication")

    from ticketlens.auth import get_gmail_service, revoke_credentials
    from ticketlens.auth.credentials import load_credentials

    existing = load_credentials()
    if existing and existing.valid:
        if confirm_action("Already authenticated. Re-authenticate?"):
            revoke_credentials()
        else:
            print_info("Keeping existing authentication")
            return

    print_info("Opening browser for Google authentication...")

    try:
        service = get_gmail_service()
        profile = service.users().getProfile(userId="me").execute()
        print_success(f"Authenticated as {profile.get('emailAddress')}")
    except FileNotFoundError as e:
        print_error(str(e))
    except HttpError as e:
        print_error(f"Authentication failed: {e}")


@cli.command()
def clear():
    """Clear cached data."""
    print_header("Clear Cache")

    if not confirm_action("Clear all cached data?"):
        print_info("Cancelled")
        return

    ThreadCache().clear()
    print_success("Cache cleared")


if __name__ == "__main__":
    cli()
