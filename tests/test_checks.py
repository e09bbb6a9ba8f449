"""Tests for check implementations."""

import re
from unittest.mock import MagicMock

import httpx
import pytest

from remote_sys_monitor import checks
from remote_sys_monitor.config import (
    CustomCommandCheck,
    FolderCountCheck,
    LoadCheck,
    PingCheck,
    ServerConfig,
    StaleDirectoriesCheck,
    TemperatureCheck,
)
from remote_sys_monitor.runners.base import BaseRunner, CommandError

UPTIME = " 10:15:01 up 12 days,  3:04,  2 users,  load average: 0.52, 12.30, 50.00\n"


def make_runner(output="", error=None):
    runner = MagicMock(spec=BaseRunner)
    if error is not None:
        runner.run.side_effect = error
    elif callable(output):
        runner.run.side_effect = output
    else:
        runner.run.return_value = output
    return runner


def http_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestFolderCount:
    """Tests for the folder count check."""

    def test_command(self):
        runner = make_runner("3\n")
        checks.folder_count(runner, "web", ["/srv/data"], 10)
        runner.run.assert_called_once_with(
            "find /srv/data -maxdepth 1 -type d | tail -n +2 | wc -l"
        )

    def test_no_folders(self):
        result = checks.folder_count(make_runner("0\n"), "web", ["/srv"], 10)
        assert result.text == "✅ No folders @ `web:/srv`"
        assert result.failed is False

    def test_one_folder(self):
        result = checks.folder_count(make_runner("1\n"), "web", ["/srv"], 10)
        assert result.text == "✅ 1 folder @ `web:/srv`"
        assert result.failed is False

    def test_below_max(self):
        result = checks.folder_count(make_runner("9\n"), "web", ["/srv"], 10)
        assert result.text == "✅ 9 folders @ `web:/srv`"
        assert result.failed is False

    @pytest.mark.parametrize("count", [10, 11, 500])
    def test_at_or_above_max(self, count):
        result = checks.folder_count(make_runner(f"{count}\n"), "web", ["/srv"], 10)
        assert result.text == f"❌ {count} folders @ `web:/srv`"
        assert result.failed is True

    def test_unparsable_count_is_zero(self):
        result = checks.folder_count(make_runner("garbage"), "web", ["/srv"], 10)
        assert result.text == "✅ No folders @ `web:/srv`"

    def test_negative_count_is_zero(self):
        result = checks.folder_count(make_runner("-5\n"), "web", ["/srv"], 10)
        assert result.text == "✅ No folders @ `web:/srv`"
        assert result.failed is False

    def test_lines_follow_path_order(self):
        outputs = {"/b": "2\n", "/a": "20\n"}

        def run(command):
            path = command.split()[1]
            return outputs[path]

        result = checks.folder_count(make_runner(run), "web", ["/b", "/a"], 10)
        assert result.lines == ["✅ 2 folders @ `web:/b`", "❌ 20 folders @ `web:/a`"]
        assert result.failed is True

    def test_error_on_one_path_keeps_others(self):
        def run(command):
            if "/missing" in command:
                raise CommandError(command, "find: '/missing': No such file or directory")
            return "4\n"

        result = checks.folder_count(make_runner(run), "web", ["/missing", "/srv"], 10)
        assert result.lines == [
            "❌ Error: find: '/missing': No such file or directory",
            "✅ 4 folders @ `web:/srv`",
        ]
        assert result.failed is True


class TestLoad:
    """Tests for the load average check."""

    @pytest.mark.parametrize(
        "interval, expected",
        [(1, "✅ load 0.52 (1min) @ web"), (5, "✅ load 12.30 (5min) @ web"), (15, "✅ load 50.00 (15min) @ web")],
    )
    def test_selects_field(self, interval, expected):
        runner = make_runner(UPTIME)
        result = checks.load(runner, "web", interval)
        runner.run.assert_called_once_with("uptime")
        assert result.text == expected

    def test_boundary_passes(self):
        result = checks.load(make_runner("load average: 50.0, 1.0, 1.0"), "web", 1)
        assert result.failed is False
        assert result.text.startswith("✅")

    def test_above_threshold_fails(self):
        result = checks.load(make_runner("load average: 50.01, 1.0, 1.0"), "web", 1)
        assert result.failed is True
        assert result.text == "❌ load 50.01 (1min) @ web"

    def test_missing_marker(self):
        result = checks.load(make_runner("uptime: command not found"), "web", 5)
        assert result.text == "❌ Cannot read load average @ web"
        assert result.failed is True

    def test_unparsable_value(self):
        result = checks.load(make_runner("load average: n/a, n/a, n/a"), "web", 5)
        assert result.text == "❌ Cannot read load average @ web"

    def test_missing_field(self):
        result = checks.load(make_runner("load average: 1.00"), "web", 15)
        assert result.failed is True

    def test_command_error(self):
        result = checks.load(make_runner(error=CommandError("uptime", "boom")), "web", 1)
        assert result.text == "❌ Error: boom"
        assert result.failed is True

    def test_parse_load(self):
        assert checks.parse_load(UPTIME, 5) == 12.30
        assert checks.parse_load("no marker", 5) is None


class TestPing:
    """Tests for the HTTP ping check."""

    def test_all_ok(self):
        client = http_client(lambda request: httpx.Response(200))
        result = checks.ping("https://example.org", ["/", "/health"], client=client)
        assert result.lines == ["✅ https://example.org/", "✅ https://example.org/health"]
        assert result.failed is False

    def test_any_2xx_passes(self):
        client = http_client(lambda request: httpx.Response(204))
        result = checks.ping("https://example.org", ["/empty"], client=client)
        assert result.text == "✅ https://example.org/empty"

    def test_error_status(self):
        def handler(request):
            if request.url.path == "/down":
                return httpx.Response(503)
            return httpx.Response(200)

        client = http_client(handler)
        result = checks.ping("https://example.org", ["/up", "/down"], client=client)
        assert result.lines == ["✅ https://example.org/up", "❌ https://example.org/down == `503`"]
        assert result.failed is True

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused")

        client = http_client(handler)
        result = checks.ping("https://example.org", ["/a", "/b", "/c"], client=client)
        assert len(result.lines) == 3
        assert result.lines[0] == "❌ https://example.org/a == `Connection refused`"
        assert result.failed is True

    def test_invalid_url(self):
        result = checks.ping("does-not-exist", ["/test"])
        assert result.text.startswith("❌ does-not-exist/test == `")
        assert result.failed is True

    def test_no_trailing_whitespace(self):
        client = http_client(lambda request: httpx.Response(200))
        result = checks.ping("https://example.org", ["/"], client=client)
        assert result.text == result.text.rstrip()


class TestTemperature:
    """Tests for the temperature sensor check."""

    W1_SLAVE = (
        "72 01 4b 46 7f ff 0e 10 57 : crc=57 YES\n"
        "72 01 4b 46 7f ff 0e 10 57 t={}\n"
    )

    def test_command(self):
        runner = make_runner(self.W1_SLAVE.format(21000))
        checks.temperature(runner, "/sys/bus/w1/devices/28-*/w1_slave")
        runner.run.assert_called_once_with("cat /sys/bus/w1/devices/28-*/w1_slave")

    def test_truncates(self):
        result = checks.temperature(make_runner(self.W1_SLAVE.format(29999)), "/s")
        assert result.text == "✅ 29°C"
        assert result.failed is False

    def test_threshold_fails(self):
        result = checks.temperature(make_runner(self.W1_SLAVE.format(30000)), "/s")
        assert result.text == "❌ 30°C"
        assert result.failed is True

    def test_first_match_only(self):
        result = checks.temperature(make_runner("t=12000 t=90000"), "/s")
        assert result.text == "✅ 12°C"

    def test_missing_pattern(self):
        result = checks.temperature(make_runner("crc=57 NO\n"), "/s")
        assert result.text == "❌ Cannot read temperature!"
        assert result.failed is True

    def test_unparsable_value(self, monkeypatch):
        monkeypatch.setattr(checks, "TEMPERATURE_PATTERN", re.compile(r"t=(\S+)"))
        result = checks.temperature(make_runner("t=2x000"), "/s")
        assert result.text == "❌ Failed to parse temperature!"
        assert result.failed is True

    def test_command_error(self):
        error = CommandError("cat /s", "cat: /s: No such file or directory")
        result = checks.temperature(make_runner(error=error), "/s")
        assert result.text == "❌ Error: cat: /s: No such file or directory"
        assert result.failed is True


class TestCustomCommand:
    """Tests for the custom command check."""

    def test_output_in_code_block(self):
        result = checks.custom_command(make_runner("Filesystem Size\n/dev/sda1 20G\n"), "df -h")
        assert result.text == "⚠️ `df -h`\n```\nFilesystem Size\n/dev/sda1 20G\n```"
        assert result.failed is False

    def test_no_trailing_newline_added(self):
        result = checks.custom_command(make_runner("ok"), "echo -n ok")
        assert result.text == "⚠️ `echo -n ok`\n```\nok```"

    def test_never_classified(self):
        result = checks.custom_command(make_runner("❌ looks bad\n"), "cat status")
        assert result.failed is False

    def test_command_error(self):
        result = checks.custom_command(make_runner(error=CommandError("x", "exit 2")), "x")
        assert result.text == "❌ Error: exit 2"
        assert result.failed is True


class TestStaleDirectories:
    """Tests for the stale directory check."""

    def test_uses_mtime(self):
        runner = make_runner("")
        checks.stale_directories(runner, "/backups", 30)
        runner.run.assert_called_once_with("find /backups -maxdepth 1 -type d -mtime +30")

    def test_none_found(self):
        result = checks.stale_directories(make_runner("\n"), "/backups", 30)
        assert result.text == "✅ No directories older than 30 days in `/backups`"
        assert result.failed is False

    def test_found(self):
        output = "/backups/c\n/backups/a\n/backups/b\n"
        result = checks.stale_directories(make_runner(output), "/backups", 7)
        assert result.lines == [
            "❌ Directories older than 7 days:",
            "```",
            "/backups/c",
            "/backups/a",
            "/backups/b",
            "```",
        ]
        assert result.failed is True

    def test_command_error(self):
        result = checks.stale_directories(make_runner(error=CommandError("f", "denied")), "/x", 1)
        assert result.text == "❌ Error: denied"


class TestRunCheck:
    """Tests for check dispatch."""

    @pytest.fixture
    def server(self):
        return ServerConfig(name="web", host="web.example.org", user="admin")

    def test_dispatch_load(self, server):
        result = checks.run_check(LoadCheck(interval=1), make_runner(UPTIME), server)
        assert result.text == "✅ load 0.52 (1min) @ web"

    def test_dispatch_folder_count(self, server):
        spec = FolderCountCheck(path=("/srv",), max_folders=2)
        result = checks.run_check(spec, make_runner("2"), server)
        assert result.text == "❌ 2 folders @ `web:/srv`"

    def test_dispatch_ping_uses_https_host(self, server):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200)

        runner = make_runner()
        result = checks.run_check(PingCheck(url=("/health",)), runner, server, client=http_client(handler))
        assert seen == ["https://web.example.org/health"]
        assert result.failed is False
        runner.run.assert_not_called()

    def test_dispatch_ping_base_url(self, server):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200)

        spec = PingCheck(url=("/x",), base_url="http://127.0.0.1:8080")
        checks.run_check(spec, make_runner(), server, client=http_client(handler))
        assert seen == ["http://127.0.0.1:8080/x"]

    def test_dispatch_others(self, server):
        assert checks.run_check(TemperatureCheck(sensor="/s"), make_runner("t=1000"), server).text == "✅ 1°C"
        assert checks.run_check(CustomCommandCheck(command="true"), make_runner(""), server).text == "⚠️ `true`\n```\n```"
        assert checks.run_check(StaleDirectoriesCheck(loc="/x", cutoff=1), make_runner(""), server).failed is False

    def test_idempotent(self, server):
        spec = FolderCountCheck(path=("/a", "/b"), max_folders=5)
        first = checks.run_check(spec, make_runner("7\n"), server)
        second = checks.run_check(spec, make_runner("7\n"), server)
        assert first == second
        assert first.text == second.text
