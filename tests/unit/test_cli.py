"""Tests for the blobcms command-line interface."""

import json
from unittest.mock import patch

import pytest
import structlog
from click.testing import CliRunner

from blobcms.application.services import ContentService
from blobcms.cli import EXIT_REJECTED, EXIT_STORAGE_FAILURE, cli
from blobcms.core.config import Settings

POSTS = {
    "name": "posts",
    "displayName": "Blog Posts",
    "fields": [
        {"name": "title", "label": "Title", "type": "text", "required": True},
        {"name": "views", "label": "Views", "type": "number", "required": False},
    ],
}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def service(adapter) -> ContentService:
    return ContentService.from_adapter(adapter)


def invoke(runner: CliRunner, service: ContentService, *args: str, **kwargs):
    return runner.invoke(cli, list(args), obj={"service": service}, **kwargs)


def create_posts(runner: CliRunner, service: ContentService) -> str:
    result = invoke(runner, service, "schemas", "create", json.dumps(POSTS))
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)["value"]["id"]


def test_schemas_list_empty(runner, service):
    result = invoke(runner, service, "schemas", "list")

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"status": "ok", "value": []}


def test_schema_create_and_show(runner, service):
    schema_id = create_posts(runner, service)

    result = invoke(runner, service, "schemas", "show", schema_id)

    assert result.exit_code == 0
    body = json.loads(result.stdout)
    assert body["value"]["name"] == "posts"
    assert body["value"]["displayName"] == "Blog Posts"


def test_schema_create_from_file(runner, service, tmp_path):
    definition = tmp_path / "posts.json"
    definition.write_text(json.dumps(POSTS), encoding="utf-8")

    result = invoke(runner, service, "schemas", "create", f"@{definition}")

    assert result.exit_code == 0
    assert json.loads(result.stdout)["value"]["name"] == "posts"


def test_schema_create_rejects_bad_json(runner, service):
    result = invoke(runner, service, "schemas", "create", "{not json")

    assert result.exit_code == 2
    assert "invalid JSON" in result.output


def test_schema_create_conflict_exits_rejected(runner, service):
    create_posts(runner, service)

    result = invoke(runner, service, "schemas", "create", json.dumps(POSTS))

    assert result.exit_code == EXIT_REJECTED
    assert json.loads(result.stdout)["status"] == "name_conflict"


def test_schema_rename_keeps_records(runner, service):
    schema_id = create_posts(runner, service)
    invoke(runner, service, "records", "add", schema_id, '{"title": "Hello"}')

    renamed = invoke(runner, service, "schemas", "update", schema_id, '{"name": "articles"}')
    listed = invoke(runner, service, "records", "list", schema_id)

    assert renamed.exit_code == 0
    assert [r["title"] for r in json.loads(listed.stdout)["value"]] == ["Hello"]


def test_schema_delete_requires_confirmation(runner, service):
    schema_id = create_posts(runner, service)

    aborted = invoke(runner, service, "schemas", "delete", schema_id, input="n\n")
    deleted = invoke(runner, service, "schemas", "delete", schema_id, "--yes")
    again = invoke(runner, service, "schemas", "delete", schema_id, "--yes")

    assert aborted.exit_code == 1
    assert deleted.exit_code == 0
    assert again.exit_code == EXIT_REJECTED
    assert json.loads(again.stdout)["status"] == "not_found"


def test_record_add_validation_failure(runner, service):
    schema_id = create_posts(runner, service)

    result = invoke(runner, service, "records", "add", schema_id, '{"title": ""}')

    assert result.exit_code == EXIT_REJECTED
    body = json.loads(result.stdout)
    assert body["status"] == "validation_failed"
    assert body["errors"] == {"title": "Title is required"}


def test_record_lifecycle(runner, service):
    schema_id = create_posts(runner, service)

    added = json.loads(
        invoke(runner, service, "records", "add", schema_id, '{"title": "Hello", "views": "3"}').stdout
    )["value"]
    updated = invoke(runner, service, "records", "update", schema_id, added["id"], '{"views": 4}')
    shown = json.loads(invoke(runner, service, "records", "show", schema_id, added["id"]).stdout)
    deleted = invoke(runner, service, "records", "delete", schema_id, added["id"])
    missing = invoke(runner, service, "records", "show", schema_id, added["id"])

    assert added["views"] == 3
    assert updated.exit_code == 0
    assert shown["value"]["views"] == 4
    assert shown["value"]["createdAt"] == added["createdAt"]
    assert deleted.exit_code == 0
    assert missing.exit_code == EXIT_REJECTED


def test_records_list_where(runner, service):
    schema_id = create_posts(runner, service)
    invoke(runner, service, "records", "add", schema_id, '{"title": "a", "views": 1}')
    invoke(runner, service, "records", "add", schema_id, '{"title": "b", "views": 2}')

    by_number = invoke(runner, service, "records", "list", schema_id, "--where", "views=2")
    by_text = invoke(runner, service, "records", "list", schema_id, "--where", "title=a")
    malformed = invoke(runner, service, "records", "list", schema_id, "--where", "title")

    assert [r["title"] for r in json.loads(by_number.stdout)["value"]] == ["b"]
    assert [r["title"] for r in json.loads(by_text.stdout)["value"]] == ["a"]
    assert malformed.exit_code == 2


def test_record_template(runner, service):
    schema_id = create_posts(runner, service)

    result = invoke(runner, service, "records", "template", schema_id)

    assert json.loads(result.stdout)["value"] == {"title": "", "views": 0}


def test_storage_failure_exits_with_distinct_code(runner, service, adapter):
    adapter.fail_on.add(("read", "cms-schemas.json"))

    result = invoke(runner, service, "schemas", "list")

    assert result.exit_code == EXIT_STORAGE_FAILURE
    assert "Storage read failed" in result.stderr


def test_storage_check(runner, service):
    result = invoke(runner, service, "storage", "check")

    assert result.exit_code == 0


def test_info_uses_loaded_settings(runner):
    settings = Settings(storage_provider="memory", registry_key="meta/schemas.json")

    with patch("blobcms.cli.get_settings", return_value=settings):
        result = runner.invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "Provider:     memory" in result.output
    assert "meta/schemas.json" in result.output


def test_invalid_configuration_is_reported(runner):
    with patch(
        "blobcms.cli.get_settings",
        side_effect=lambda: Settings(storage_provider="s3", s3_bucket=None),
    ):
        result = runner.invoke(cli, ["schemas", "list"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_each_command_binds_a_fresh_correlation_id(runner, service):
    invoke(runner, service, "schemas", "list")
    first = structlog.contextvars.get_contextvars()["correlation_id"]
    invoke(runner, service, "schemas", "list")
    second = structlog.contextvars.get_contextvars()["correlation_id"]

    assert first.startswith("cid_")
    assert first != second
