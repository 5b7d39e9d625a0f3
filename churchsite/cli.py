"""Typer CLI for the church website."""

from __future__ import annotations

import json
from pathlib import Path

from sqlalchemy.exc import OperationalError
import typer
import uvicorn

from . import database
from .config import (
    load_settings,
    settings,
    settings_as_dict,
    update_config_file,
)
from .results import Err
from .seed import seed_demo_content
from .storage import init_db, upgrade_database
from .store import build_stores

app = typer.Typer(help="Church website command-line interface")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Show help when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _require_backend() -> None:
    if database.backend is None:
        typer.secho(
            "The durable backend is disabled (database_url is empty).",
            err=True,
            fg=typer.colors.RED,
        )
        raise typer.Exit(code=1)


@app.command("init-db")
def init_db_command() -> None:
    """Create or upgrade the schema on the configured database."""
    _require_backend()
    actions = init_db()
    if not actions:
        typer.echo("Database unreachable; nothing was changed.")
        raise typer.Exit(code=1)
    for action in actions:
        typer.echo(f"- {action}")


@app.command("upgrade-db")
def upgrade_db(
    no_backup: bool = typer.Option(
        False,
        "--no-backup",
        help="Skip creating a .bak copy of a SQLite database before upgrading",
    ),
) -> None:
    """Upgrade the database schema if needed."""
    _require_backend()
    try:
        actions = upgrade_database(make_backup=not no_backup)
    except OperationalError as exc:
        message = str(getattr(exc, "orig", exc)).lower()
        if "readonly" in message or "read-only" in message:
            typer.secho(
                "Unable to upgrade because the database is read-only. "
                f"Ensure write access to {settings.database_url}.",
                err=True,
                fg=typer.colors.RED,
            )
            raise typer.Exit(code=1)
        raise

    typer.echo("Database upgrade complete:")
    for action in actions:
        typer.echo(f"- {action}")


@app.command("status")
def status() -> None:
    """Report whether the durable backend is reachable."""
    stores = build_stores(database.backend, public_dir=settings.public_dir)
    availability = stores.availability()
    color = typer.colors.GREEN if availability.is_available else typer.colors.YELLOW
    typer.secho(f"Durable backend: {availability.value}", fg=color)
    if availability.is_available:
        typer.echo(f"Messages: {len(stores.messages.find_all())}")
        typer.echo(f"Events: {len(stores.events.find_all())}")
        typer.echo(f"Announcements: {len(stores.announcements.find_all())}")


@app.command("migrate-pdfs")
def migrate_pdfs() -> None:
    """Copy message PDFs referenced by legacy file paths into the database."""
    _require_backend()
    init_db()
    stores = build_stores(database.backend, public_dir=settings.public_dir)
    result = stores.messages.migrate_legacy_attachments()
    if isinstance(result, Err):
        typer.secho(f"Migration failed: {result.reason}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(f"Migrated {result.value} PDFs from {settings.public_dir}.")


@app.command("runserver")
def runserver(
    host: str = typer.Option(settings.app_host, "--host", help="Host to bind"),
    port: int = typer.Option(settings.app_port, "--port", help="Port to bind"),
):
    """Start the FastAPI app under uvicorn."""
    config = uvicorn.Config(
        "churchsite.api:app",
        host=host,
        port=port,
        reload=False,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    server = uvicorn.Server(config)
    typer.echo(f"Starting church website on {host}:{port}")
    server.run()


@app.command("seed-data")
def seed_data(
    messages: int = typer.Option(
        settings.seed_messages, "--messages", min=0, help="Number of messages to create"
    ),
    events: int = typer.Option(
        settings.seed_events, "--events", min=0, help="Number of events to create"
    ),
    announcements: int = typer.Option(
        settings.seed_announcements,
        "--announcements",
        min=0,
        help="Number of announcements to create",
    ),
):
    """Populate the database with fake content for testing."""
    _require_backend()
    init_db()
    stores = build_stores(database.backend, public_dir=settings.public_dir)
    if not stores.availability().is_available:
        typer.secho("Database unreachable; nothing was seeded.", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    stats = seed_demo_content(
        stores, messages=messages, events=events, announcements=announcements
    )
    typer.echo(
        f"Seed complete: {stats['messages']} messages, {stats['events']} events, "
        f"{stats['announcements']} announcements created."
    )


@app.command("config")
def configure(
    show: bool = typer.Option(
        False, "--show", help="Show the current effective configuration"
    ),
    database_url: str | None = typer.Option(
        None, "--database-url", help="SQLAlchemy URL of the durable backend ('' disables it)"
    ),
    admin_user: str | None = typer.Option(None, "--admin-user", help="Admin login name"),
    admin_password: str | None = typer.Option(
        None, "--admin-password", help="Admin login password"
    ),
    session_max_age_hours: int | None = typer.Option(
        None, "--session-max-age-hours", min=1, help="Admin session lifetime"
    ),
    max_pdf_bytes: int | None = typer.Option(
        None, "--max-pdf-bytes", min=1, help="Largest accepted message PDF"
    ),
    max_image_bytes: int | None = typer.Option(
        None, "--max-image-bytes", min=1, help="Largest accepted event/announcement image"
    ),
    homepage_message_limit: int | None = typer.Option(
        None, "--homepage-message-limit", min=1, help="Messages shown on the homepage"
    ),
    homepage_event_limit: int | None = typer.Option(
        None, "--homepage-event-limit", min=1, help="Events shown on the homepage"
    ),
    seed_fallback_messages: bool | None = typer.Option(
        None,
        "--seed-fallback-messages/--no-seed-fallback-messages",
        help="Start the temporary message list with sample sermons",
    ),
    host: str | None = typer.Option(None, "--host", help="Default host for runserver"),
    port: int | None = typer.Option(None, "--port", help="Default port for runserver"),
    config_path: Path | None = typer.Option(
        None, "--config-path", help="Path to churchsite.toml (default: ./churchsite.toml)"
    ),
):
    """View or update the persistent configuration file."""

    updates = {
        "database_url": database_url,
        "admin_user": admin_user,
        "admin_password": admin_password,
        "session_max_age_hours": session_max_age_hours,
        "max_pdf_bytes": max_pdf_bytes,
        "max_image_bytes": max_image_bytes,
        "homepage_message_limit": homepage_message_limit,
        "homepage_event_limit": homepage_event_limit,
        "seed_fallback_messages": seed_fallback_messages,
        "app_host": host,
        "app_port": port,
    }
    clean_updates = {k: v for k, v in updates.items() if v is not None}

    target_path = config_path or settings.config_path
    if clean_updates:
        settings_ref = update_config_file(clean_updates, path=target_path)
        typer.echo(f"Updated configuration in {target_path}")
    else:
        settings_ref = load_settings(target_path)
    if show or not clean_updates:
        effective = settings_as_dict(settings_ref)
        effective["config_path"] = str(target_path)
        typer.echo(json.dumps(effective, indent=2))


if __name__ == "__main__":
    app()
