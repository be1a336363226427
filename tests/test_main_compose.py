"""Tests for the `compose` command exit codes and console output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, text

from app.main import main_compose_from_file


def _write_params(tmp_path: Path, params: Any) -> Path:
    """Write a params bag as a JSON file.

    Args:
        tmp_path: Pytest temporary directory.
        params: JSON-compatible params bag.

    Returns:
        Path: Written params file.
    """

    params_file = tmp_path / "params.json"
    params_file.write_text(json.dumps(params), encoding="utf-8")
    return params_file


def _count_invocations(engine: Engine) -> int:
    with engine.connect() as connection:
        return int(connection.execute(text("SELECT COUNT(*) FROM job_invocation")).scalar_one())


def test_main_compose_saves_invocation(seeded_engine: Engine, tmp_path, capsys) -> None:
    """Return 0 and persist the invocation for valid params.

    Returns:
        None: Assertions validate exit code and persistence.

    Raises:
        AssertionError: Raised when the invocation is not saved.
    """

    params_file = _write_params(
        tmp_path,
        {
            "template_id": "tpl-1",
            "targeting_type": "static_query",
            "bookmark_id": "bm-1",
            "inputs": [{"name": "Command", "value": "uptime"}],
        },
    )

    exit_code = main_compose_from_file(params_file=params_file, principal_login="operator")

    assert exit_code == 0
    assert "Saved job invocation" in capsys.readouterr().out
    assert _count_invocations(seeded_engine) == 1


def test_main_compose_reports_aggregated_rejection(seeded_engine: Engine, tmp_path, capsys) -> None:
    """Return 1 and print every issue when validation rejects the graph.

    Returns:
        None: Assertions validate exit code and output.

    Raises:
        AssertionError: Raised when issues are not printed.
    """

    params_file = _write_params(tmp_path, {"template_id": "tpl-1", "search_query": "some hosts"})

    exit_code = main_compose_from_file(params_file=params_file, principal_login="operator")

    output = capsys.readouterr().out
    assert exit_code == 1
    assert output.startswith("INVOCATION_NOT_SAVED:")
    assert " - Targeting can't be blank" in output
    assert " - Template testing1: Not all required inputs have values. Missing inputs: Command" in output
    assert _count_invocations(seeded_engine) == 0


def test_main_compose_reports_targeting_conflict(seeded_engine: Engine, tmp_path, capsys) -> None:
    """Return 1 with the conflict code when both targeting modes are given.

    Returns:
        None: Assertions validate exit code and output.

    Raises:
        AssertionError: Raised when the conflict is not reported.
    """

    params_file = _write_params(
        tmp_path,
        {"template_id": "tpl-1", "targeting_type": "static_query", "bookmark_id": "bm-1", "search_query": "x"},
    )

    exit_code = main_compose_from_file(params_file=params_file, principal_login="operator")

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("TARGETING_CONFLICT:")
    assert _count_invocations(seeded_engine) == 0


def test_main_compose_reports_unknown_template(seeded_engine: Engine, tmp_path, capsys) -> None:
    """Return 1 with the not-found code when a referenced template is absent.

    Returns:
        None: Assertions validate exit code and output.

    Raises:
        AssertionError: Raised when the lookup failure escapes.
    """

    params_file = _write_params(
        tmp_path,
        {"template_id": "nope", "targeting_type": "static_query", "search_query": "x"},
    )

    exit_code = main_compose_from_file(params_file=params_file, principal_login="operator")

    output = capsys.readouterr().out
    assert exit_code == 1
    assert output.startswith("NOT_FOUND:")
    assert "nope" in output
    assert _count_invocations(seeded_engine) == 0


def test_main_compose_reports_malformed_params(seeded_engine: Engine, tmp_path, capsys) -> None:
    """Return 1 with the invalid-params code for a malformed inputs value.

    Returns:
        None: Assertions validate exit code and output.

    Raises:
        AssertionError: Raised when the parameter error escapes.
    """

    params_file = _write_params(
        tmp_path,
        {"template_id": "tpl-1", "targeting_type": "static_query", "search_query": "x", "inputs": "Command=1"},
    )

    exit_code = main_compose_from_file(params_file=params_file, principal_login="operator")

    assert exit_code == 1
    assert capsys.readouterr().out == "INVALID_PARAMS: inputs must be a sequence\n"
    assert _count_invocations(seeded_engine) == 0
