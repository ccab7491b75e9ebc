"""Tests for the brytashop command line."""

from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from brytashop.cli import cli


def test_grant_permissions():
    runner = CliRunner()

    with patch(
        "brytashop.cli.grant_permissions", AsyncMock(return_value=["USER", "ADMIN"])
    ) as grant:
        result = runner.invoke(cli, ["users", "grant", "ada@example.com", "admin"])

    assert result.exit_code == 0, result.output
    grant.assert_awaited_once_with("ada@example.com", ["ADMIN"])
    assert "USER, ADMIN" in result.output


def test_grant_rejects_unknown_permission():
    runner = CliRunner()

    result = runner.invoke(cli, ["users", "grant", "ada@example.com", "SUPERUSER"])

    assert result.exit_code != 0
    assert "SUPERUSER" in result.output
