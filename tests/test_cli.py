"""Tests for the command-line interface."""

import json

import pytest

from scripts.cli.shortlink_cli import main

MEMORY = ["--db-url", "memory://"]


@pytest.mark.asyncio
class TestCLI:

    async def test_shorten(self, capsys):
        exit_code = await main(MEMORY + ["shorten", "https://example.com/long", "--custom-code", "cli123", "--owner", "alice"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["success"] is True
        assert output["short_code"] == "cli123"
        assert output["owner_id"] == "alice"

    async def test_shorten_invalid_url(self, capsys):
        exit_code = await main(MEMORY + ["shorten", "ftp://example.com"])

        assert exit_code == 1
        output = json.loads(capsys.readouterr().err)
        assert output == {"success": False, "error": "Invalid URL format. Must be http or https URL."}

    async def test_analytics_unknown(self, capsys):
        exit_code = await main(MEMORY + ["analytics", "nope42"])

        assert exit_code == 1
        assert json.loads(capsys.readouterr().err)["error"] == "Short URL not found."

    async def test_health(self, capsys):
        exit_code = await main(MEMORY + ["health"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["health"]["database"] is True

    async def test_token(self, capsys):
        exit_code = await main(["token", "alice"])

        assert exit_code == 0
        assert capsys.readouterr().out.count(".") == 2

    async def test_no_command(self, capsys):
        assert await main([]) == 1
