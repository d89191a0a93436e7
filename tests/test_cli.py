"""CLI tests against a temporary local store."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator

import pytest
from click.testing import CliRunner
from loguru import logger

from boardshelf.cli import main

WORKSPACE_FILE = "boardshelf%3Aworkspace"


@pytest.fixture
def runner(settings_env) -> Iterator[CliRunner]:
    yield CliRunner()
    # Commands point loguru at the runner's captured stderr.
    logger.remove()
    logger.add(sys.stderr)


def _kv(tmp_path):
    kv = tmp_path / "kv"
    kv.mkdir(exist_ok=True)
    return kv


def test_tree_prints_default_workspace(runner: CliRunner) -> None:
    result = runner.invoke(main, ["tree"])
    assert result.exit_code == 0, result.output
    assert "+ Boards  [root]" in result.output
    assert "- Untitled *" in result.output


def test_check_reports_missing_record(runner: CliRunner) -> None:
    result = runner.invoke(main, ["check"])
    assert result.exit_code == 1
    assert "no workspace record stored" in result.output


def test_check_reports_violations_then_repair_fixes_them(runner: CliRunner, tmp_path) -> None:
    broken = {
        "rootId": "root",
        "itemsById": {
            "root": {"id": "root", "name": "Boards", "type": "folder", "childrenIds": ["a", "a"]},
            "a": {"id": "a", "name": "A", "type": "board"},
            "lost": {"id": "lost", "name": "Lost", "type": "board"},
        },
        "activeBoardId": "a",
        "expandedFolderIds": [],
    }
    (_kv(tmp_path) / WORKSPACE_FILE).write_text(json.dumps(broken))

    result = runner.invoke(main, ["check"])
    assert result.exit_code == 1
    assert "'lost' has no parent" in result.output

    result = runner.invoke(main, ["repair"])
    assert result.exit_code == 0, result.output
    assert "3 items" in result.output

    result = runner.invoke(main, ["check"])
    assert result.exit_code == 0, result.output
    assert "valid" in result.output

    repaired = json.loads((tmp_path / "kv" / WORKSPACE_FILE).read_text())
    assert repaired["itemsById"]["root"]["childrenIds"] == ["a", "lost"]


def test_check_reports_unparseable_record(runner: CliRunner, tmp_path) -> None:
    (_kv(tmp_path) / WORKSPACE_FILE).write_text('{"itemsById": 5}')
    result = runner.invoke(main, ["check"])
    assert result.exit_code == 1
    assert "record does not parse" in result.output


def test_payload_command(runner: CliRunner, tmp_path) -> None:
    (_kv(tmp_path) / "boardshelf%3Aboard%3Ab1").write_text('{"elements":[]}')

    result = runner.invoke(main, ["payload", "b1"])
    assert result.exit_code == 0
    assert '{"elements":[]}' in result.output

    result = runner.invoke(main, ["payload", "b1", "--pretty"])
    assert '"elements": []' in result.output

    result = runner.invoke(main, ["payload", "missing"])
    assert result.exit_code == 1
