"""Tests for the dbtree command line."""

import json

from typer.testing import CliRunner

from dbtree.cli import app

runner = CliRunner()


def test_keys_lists_default_bindings():
    result = runner.invoke(app, ["keys"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert "refresh = r (n)" in lines
    assert "action_1 = enter (n)" in lines
    assert lines == sorted(lines)


def test_keys_reads_config(tmp_path):
    path = tmp_path / "dbtree.json"
    path.write_text(json.dumps({"drawer": {"mappings": {"toggle": {"key": "space"}}}}))

    result = runner.invoke(app, ["keys", "--config", str(path)])

    assert result.output.splitlines() == ["toggle = space (n)"]


def test_invalid_config_exits_with_error(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")

    result = runner.invoke(app, ["keys", "--config", str(path)])

    assert result.exit_code == 2
