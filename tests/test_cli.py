"""Tests for the wifimgr command-line interface.

The HTTP layer is replaced by patching MistClient and InventoryManager in
the cli module, so these tests exercise argument parsing, wiring, output
and exit codes.
"""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from wifimgr import cli
from wifimgr.api.exceptions import NotFoundError, ServerError
from wifimgr.api.inventory import Site
from wifimgr.config import ENV_KEYS


@pytest.fixture
def env(monkeypatch, tmp_path):
    for name in ENV_KEYS.values():
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MIST_API_TOKEN", "tok")
    monkeypatch.setenv("MIST_ORG_ID", "org-1")
    return monkeypatch


@pytest.fixture
def manager():
    """Mock InventoryManager knowing one site, HQ (hq-id)."""
    manager = MagicMock()

    async def by_name(org_id, name, case_insensitive=False):
        return Site(id="hq-id", name="HQ") if name == "HQ" else None

    manager.get_site_by_name = AsyncMock(side_effect=by_name)
    manager.get_site = AsyncMock(side_effect=NotFoundError("Resource"))
    manager.assign_devices = AsyncMock(return_value=None)
    return manager


@pytest.fixture
def patched_api(manager):
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)

    with patch.object(cli, "MistClient", return_value=client), \
            patch.object(cli, "InventoryManager", return_value=manager):
        yield manager


class TestArgumentParsing:
    """Test the command tree."""

    def test_inline_assign(self):
        args = cli.build_parser().parse_args(["ap", "assign-bulk", "HQ", "m1", "m2"])

        assert args.device == "ap"
        source = cli.build_source(args)
        assert source.site == "HQ"
        assert source.macs == ("m1", "m2")

    def test_file_with_site_is_mac_list(self):
        args = cli.build_parser().parse_args(["gateway", "assign-bulk-file", "macs.txt", "HQ"])

        source = cli.build_source(args)
        assert type(source).__name__ == "MacFileSource"
        assert args.device == "gateway"

    def test_file_without_site_is_csv(self):
        args = cli.build_parser().parse_args(["switch", "assign-bulk-file", "aps.csv"])

        assert type(cli.build_source(args)).__name__ == "CsvFileSource"

    def test_global_flags(self):
        args = cli.build_parser().parse_args(
            ["--json", "--case-insensitive", "--max-concurrent-sites", "3", "-vv",
             "site", "resolve", "HQ"]
        )

        assert args.json is True
        assert args.case_insensitive is True
        assert args.max_concurrent_sites == 3
        assert args.verbose == 2
        assert args.identifiers == ["HQ"]

    def test_unset_flags_do_not_override_env(self):
        args = cli.build_parser().parse_args(["site", "resolve", "HQ"])

        assert args.case_insensitive is None
        assert args.no_reassign is None

    def test_missing_macs_is_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            cli.build_parser().parse_args(["ap", "assign-bulk", "HQ"])

        assert exc.value.code == 2


class TestAssignCommands:
    """Test assign-bulk and assign-bulk-file end to end."""

    def test_inline_success(self, env, patched_api, capsys):
        code = cli.main(["ap", "assign-bulk", "HQ", "00:11:22:33:44:55", "00:11:22:33:44:56"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Bulk AP assignment complete!" in out
        assert "  Successfully assigned: 2 of 2 APs" in out
        patched_api.assign_devices.assert_awaited_once_with(
            "org-1", "hq-id", ["00:11:22:33:44:55", "00:11:22:33:44:56"], no_reassign=False
        )

    def test_batch_failure_exits_non_zero(self, env, patched_api, capsys):
        patched_api.assign_devices.side_effect = ServerError("Server error (500)")

        code = cli.main(["ap", "assign-bulk", "HQ", "00:11:22:33:44:55"])

        captured = capsys.readouterr()
        assert code == 1
        assert "  Failed assignments: 1" in captured.out
        assert "Error:" in captured.err

    def test_unknown_site_exits_non_zero(self, env, patched_api, capsys):
        code = cli.main(["ap", "assign-bulk", "Nowhere", "00:11:22:33:44:55"])

        assert code == 1
        assert "no site found matching name 'Nowhere'" in capsys.readouterr().err
        patched_api.assign_devices.assert_not_called()

    def test_csv_json_output(self, env, patched_api, capsys, tmp_path):
        path = tmp_path / "aps.csv"
        path.write_text("00:11:22:33:44:01,HQ\n00:11:22:33:44:02,Elsewhere\n")

        code = cli.main(["--json", "ap", "assign-bulk-file", str(path)])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["mode"] == "multi_target"
        assert (data["total"], data["succeeded"], data["failed"]) == (2, 1, 1)
        assert data["outcomes"][1]["error"] == "no site found matching name 'Elsewhere'"

    def test_no_reassign_flag(self, env, patched_api):
        cli.main(["--no-reassign", "ap", "assign-bulk", "HQ", "00:11:22:33:44:55"])

        assert patched_api.assign_devices.await_args.kwargs["no_reassign"] is True

    def test_malformed_csv(self, env, patched_api, capsys, tmp_path):
        path = tmp_path / "aps.csv"
        path.write_text("00:11:22:33:44:01\n")

        code = cli.main(["ap", "assign-bulk-file", str(path)])

        err = capsys.readouterr().err
        assert code == 1
        assert "invalid format in file: expected MAC,SITE format" in err
        assert str(path) in err
        patched_api.assign_devices.assert_not_called()

    def test_missing_configuration(self, env, patched_api, capsys):
        env.delenv("MIST_API_TOKEN")

        code = cli.main(["ap", "assign-bulk", "HQ", "00:11:22:33:44:55"])

        assert code == 1
        assert "MIST_API_TOKEN" in capsys.readouterr().err

    def test_invalid_concurrency(self, env, capsys):
        code = cli.main(["--max-concurrent-sites", "0", "site", "resolve", "HQ"])

        assert code == 1
        assert "WIFIMGR_MAX_CONCURRENT_SITES" in capsys.readouterr().err


class TestSiteResolve:
    """Test site resolve."""

    def test_resolves_and_reports_misses(self, env, patched_api, capsys):
        code = cli.main(["site", "resolve", "HQ", "Nowhere", "HQ"])

        out = capsys.readouterr().out.splitlines()
        assert code == 1
        assert out == [
            "HQ -> hq-id",
            "Nowhere: no site found matching name 'Nowhere'",
            "HQ -> hq-id",
        ]
        # Repeated identifiers are served from the cache
        assert patched_api.get_site_by_name.await_count == 2

    def test_json(self, env, patched_api, capsys):
        code = cli.main(["--json", "site", "resolve", "HQ"])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == [
            {"identifier": "HQ", "kind": "name", "site_id": "hq-id", "error": None}
        ]
