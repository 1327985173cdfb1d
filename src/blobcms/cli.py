"""Command-line interface for BlobCMS.

This module provides the CLI commands for managing schemas and entries
stored in the configured blob store.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, NoReturn

import click
from pydantic import ValidationError

from blobcms.application.services import ContentService, OperationResult
from blobcms.core.config import get_settings
from blobcms.core.logging import (
    LoggingContext,
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from blobcms.domain.exceptions import StorageFailureError

EXIT_REJECTED = 1
EXIT_STORAGE_FAILURE = 2


def _parse_json(value: str) -> Any:
    """Parse inline JSON, or the contents of a file when prefixed with '@'."""
    try:
        if value.startswith("@"):
            value = Path(value[1:]).read_text(encoding="utf-8")
        return json.loads(value)
    except OSError as e:
        raise click.BadParameter(f"cannot read {value[1:]}: {e}") from e
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}") from e


def _parse_json_object(value: str) -> dict[str, Any]:
    data = _parse_json(value)
    if not isinstance(data, dict):
        raise click.BadParameter("expected a JSON object")
    return data


def _get_service(ctx: click.Context) -> ContentService:
    obj = ctx.ensure_object(dict)
    if "service" not in obj:
        obj["service"] = ContentService.from_settings(obj.get("settings") or get_settings())
    return obj["service"]


def _run(ctx: click.Context, operation: str, make_call) -> None:
    """Run one service coroutine, print its outcome and exit accordingly."""
    service = _get_service(ctx)
    logger = get_logger(__name__)

    # One correlation ID for every log line of this command
    clear_context()
    bind_correlation_id(new_correlation_id())

    try:
        with LoggingContext(command=operation):
            result: OperationResult = asyncio.run(make_call(service))
    except StorageFailureError as e:
        logger.error("Storage failure", command=operation, error=str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_STORAGE_FAILURE)

    click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    if not result.ok:
        ctx.exit(EXIT_REJECTED)


@click.group()
@click.version_option(version="0.1.0", prog_name="BlobCMS")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides environment)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """BlobCMS - runtime-defined schemas and records on a blob store."""
    obj = ctx.ensure_object(dict)
    if "service" in obj:
        return

    try:
        settings = get_settings()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)
    obj["settings"] = settings


@cli.group()
def schemas() -> None:
    """Manage schema definitions."""


@schemas.command("list")
@click.pass_context
def list_schemas(ctx: click.Context) -> None:
    """List all schemas."""
    _run(ctx, "schemas.list", lambda s: s.list_schemas())


@schemas.command("show")
@click.argument("schema_id")
@click.pass_context
def show_schema(ctx: click.Context, schema_id: str) -> None:
    """Show one schema."""
    _run(ctx, "schemas.show", lambda s: s.get_schema(schema_id))


@schemas.command("create")
@click.argument("definition", callback=lambda _c, _p, v: _parse_json_object(v))
@click.pass_context
def create_schema(ctx: click.Context, definition: dict[str, Any]) -> None:
    """Create a schema from a JSON DEFINITION (inline or @file)."""
    _run(ctx, "schemas.create", lambda s: s.create_schema(definition))


@schemas.command("update")
@click.argument("schema_id")
@click.argument("changes", callback=lambda _c, _p, v: _parse_json_object(v))
@click.pass_context
def update_schema(ctx: click.Context, schema_id: str, changes: dict[str, Any]) -> None:
    """Update a schema. Renaming migrates its records."""
    _run(ctx, "schemas.update", lambda s: s.update_schema(schema_id, changes))


@schemas.command("delete")
@click.argument("schema_id")
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_schema(ctx: click.Context, schema_id: str, yes: bool) -> None:
    """Delete a schema and all of its records."""
    if not yes:
        click.confirm(f"Delete schema {schema_id} and all of its records?", abort=True)
    _run(ctx, "schemas.delete", lambda s: s.delete_schema(schema_id))


@cli.group()
def records() -> None:
    """Manage records of a schema."""


@records.command("list")
@click.argument("schema_id")
@click.option(
    "--where",
    "filters",
    multiple=True,
    help="Keep records whose FIELD equals a JSON VALUE, given as FIELD=VALUE",
)
@click.pass_context
def list_records(ctx: click.Context, schema_id: str, filters: tuple[str, ...]) -> None:
    """List records of a schema."""
    conditions: dict[str, Any] = {}
    for item in filters:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected FIELD=VALUE, got '{item}'", param_hint="--where")
        try:
            conditions[name] = json.loads(raw)
        except json.JSONDecodeError:
            conditions[name] = raw
    _run(ctx, "records.list", lambda s: s.list_entries(schema_id, conditions or None))


@records.command("show")
@click.argument("schema_id")
@click.argument("entry_id")
@click.pass_context
def show_record(ctx: click.Context, schema_id: str, entry_id: str) -> None:
    """Show one record."""
    _run(ctx, "records.show", lambda s: s.get_entry(schema_id, entry_id))


@records.command("template")
@click.argument("schema_id")
@click.pass_context
def record_template(ctx: click.Context, schema_id: str) -> None:
    """Print default values for a new record."""
    _run(ctx, "records.template", lambda s: s.new_entry_template(schema_id))


@records.command("add")
@click.argument("schema_id")
@click.argument("data", callback=lambda _c, _p, v: _parse_json_object(v))
@click.pass_context
def add_record(ctx: click.Context, schema_id: str, data: dict[str, Any]) -> None:
    """Add a record from JSON DATA (inline or @file)."""
    _run(ctx, "records.add", lambda s: s.create_entry(schema_id, data))


@records.command("update")
@click.argument("schema_id")
@click.argument("entry_id")
@click.argument("data", callback=lambda _c, _p, v: _parse_json_object(v))
@click.pass_context
def update_record(ctx: click.Context, schema_id: str, entry_id: str, data: dict[str, Any]) -> None:
    """Merge JSON DATA into a record."""
    _run(ctx, "records.update", lambda s: s.update_entry(schema_id, entry_id, data))


@records.command("delete")
@click.argument("schema_id")
@click.argument("entry_id")
@click.pass_context
def delete_record(ctx: click.Context, schema_id: str, entry_id: str) -> None:
    """Delete a record."""
    _run(ctx, "records.delete", lambda s: s.delete_entry(schema_id, entry_id))


@cli.group()
def storage() -> None:
    """Inspect the configured storage backend."""


@storage.command("check")
@click.pass_context
def check_storage(ctx: click.Context) -> None:
    """Test connectivity to the configured storage backend."""
    service = _get_service(ctx)
    adapter = service.registry.documents.adapter
    success, message = asyncio.run(adapter.test_connection())
    click.echo(message or ("OK" if success else "Failed"))
    if not success:
        ctx.exit(EXIT_STORAGE_FAILURE)


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Display BlobCMS configuration."""
    settings = ctx.ensure_object(dict).get("settings") or get_settings()

    click.echo(f"""
BlobCMS v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}

Storage:
  Provider:     {settings.storage_provider}
  Bucket:       {settings.s3_bucket or '-'}
  Region:       {settings.s3_region}
  Endpoint:     {settings.s3_endpoint_url or '-'}
  Local Path:   {settings.local_storage_path}

Layout:
  Registry:     {settings.registry_key}
  Collections:  {settings.collection_key_prefix}<name>{settings.collection_key_suffix}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `blobcms` command is run
    or when using `python -m blobcms`.
    """
    cli()


if __name__ == "__main__":
    main()
