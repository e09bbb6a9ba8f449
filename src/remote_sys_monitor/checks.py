"""Check implementations.

Every check runs one or more commands (or HTTP requests), parses the loosely
formatted text that comes back and turns it into a ``CheckResult`` whose lines
start with a pass or fail marker. Transport and parse problems never escape a
check; they become failed lines instead.
"""

import logging
import re
from collections.abc import Sequence

import httpx

from remote_sys_monitor.config import (
    CheckSpec,
    CustomCommandCheck,
    FolderCountCheck,
    LoadCheck,
    PingCheck,
    ServerConfig,
    StaleDirectoriesCheck,
    TemperatureCheck,
)
from remote_sys_monitor.models import (
    FAIL_MARKER,
    NOTICE_MARKER,
    PASS_MARKER,
    CheckResult,
    error_result,
    marker,
)
from remote_sys_monitor.runners.base import BaseRunner, CommandError

logger = logging.getLogger(__name__)

LOAD_THRESHOLD = 50.0
TEMPERATURE_THRESHOLD = 30  # °C
DEFAULT_HTTP_TIMEOUT = 10.0

LOAD_MARKER = "load average:"
LOAD_FIELDS = {1: 0, 5: 1, 15: 2}
TEMPERATURE_PATTERN = re.compile(r"t=(\d+)")


def folder_count(
    runner: BaseRunner,
    server_name: str,
    paths: Sequence[str],
    max_folders: int,
) -> CheckResult:
    """Count the direct subdirectories of each path.

    One line per path, in input order. A path fails when its count reaches
    ``max_folders``; an empty or single-folder path always passes.
    """
    lines = []
    failed = False
    for path in paths:
        command = f"find {path} -maxdepth 1 -type d | tail -n +2 | wc -l"
        try:
            output = runner.run(command)
        except CommandError as e:
            logger.warning(f"Folder count failed for {server_name}:{path}: {e}")
            lines.append(f"{FAIL_MARKER} Error: {e}")
            failed = True
            continue

        try:
            count = max(int(output.strip()), 0)
        except ValueError:
            count = 0

        if count == 0:
            line_failed, description = False, "No folders"
        elif count == 1:
            line_failed, description = False, "1 folder"
        else:
            line_failed, description = count >= max_folders, f"{count} folders"

        failed = failed or line_failed
        lines.append(f"{marker(line_failed)} {description} @ `{server_name}:{path}`")

    return CheckResult(text="\n".join(lines), failed=failed)


def parse_load(uptime_output: str, interval: int) -> float | None:
    """Extract the load average for ``interval`` minutes from ``uptime`` output."""
    if LOAD_MARKER not in uptime_output or interval not in LOAD_FIELDS:
        return None
    values = uptime_output.split(LOAD_MARKER, 1)[1].split(",")
    index = LOAD_FIELDS[interval]
    if index >= len(values):
        return None
    try:
        return float(values[index].strip())
    except ValueError:
        return None


def load(runner: BaseRunner, server_name: str, interval: int) -> CheckResult:
    """Check the 1, 5 or 15 minute load average against the threshold."""
    try:
        output = runner.run("uptime")
    except CommandError as e:
        logger.warning(f"uptime failed on {server_name}: {e}")
        return error_result(e)

    value = parse_load(output, interval)
    if value is None:
        logger.warning(f"Unexpected uptime output on {server_name}: {output.strip()!r}")
        return CheckResult(
            text=f"{FAIL_MARKER} Cannot read load average @ {server_name}",
            failed=True,
        )

    failed = value > LOAD_THRESHOLD
    return CheckResult(
        text=f"{marker(failed)} load {value:.2f} ({interval}min) @ {server_name}",
        failed=failed,
    )


def ping(
    base_url: str,
    paths: Sequence[str],
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> CheckResult:
    """GET ``base_url + path`` for every path; any 2xx answer passes."""
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)

    lines = []
    failed = False
    try:
        for path in paths:
            url = f"{base_url}{path}"
            try:
                response = client.get(url)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.warning(f"GET {url} failed: {e}")
                lines.append(f"{FAIL_MARKER} {url} == `{str(e) or type(e).__name__}`")
                failed = True
                continue

            if response.is_success:
                lines.append(f"{PASS_MARKER} {url}")
            else:
                lines.append(f"{FAIL_MARKER} {url} == `{response.status_code}`")
                failed = True
    finally:
        if owns_client:
            client.close()

    return CheckResult(text="\n".join(lines).rstrip(), failed=failed)


def temperature(runner: BaseRunner, sensor: str) -> CheckResult:
    """Read a sensor file containing ``t=<millidegrees>``."""
    try:
        output = runner.run(f"cat {sensor}")
    except CommandError as e:
        logger.warning(f"Cannot read sensor {sensor}: {e}")
        return error_result(e)

    match = TEMPERATURE_PATTERN.search(output)
    if match is None:
        return CheckResult(text=f"{FAIL_MARKER} Cannot read temperature!", failed=True)

    # unreachable with the digits-only pattern, kept for looser patterns
    try:
        degrees = int(match.group(1)) // 1000
    except ValueError:
        return CheckResult(text=f"{FAIL_MARKER} Failed to parse temperature!", failed=True)

    failed = degrees >= TEMPERATURE_THRESHOLD
    return CheckResult(text=f"{marker(failed)} {degrees}°C", failed=failed)


def custom_command(runner: BaseRunner, command: str) -> CheckResult:
    """Run ``command`` and show its output in a code block, unjudged."""
    try:
        output = runner.run(command)
    except CommandError as e:
        logger.warning(f"Custom command failed: {e}")
        return error_result(e)

    return CheckResult(text=f"{NOTICE_MARKER} `{command}`\n```\n{output}```", failed=False)


def stale_directories(runner: BaseRunner, loc: str, cutoff: int) -> CheckResult:
    """List directories in ``loc`` whose contents changed more than ``cutoff`` days ago."""
    # -mtime follows content changes, -ctime would also follow chmod/chown
    try:
        output = runner.run(f"find {loc} -maxdepth 1 -type d -mtime +{cutoff}")
    except CommandError as e:
        logger.warning(f"Stale directory search in {loc} failed: {e}")
        return error_result(e)

    directories = [line for line in output.split("\n") if line.strip()]
    if not directories:
        return CheckResult(
            text=f"{PASS_MARKER} No directories older than {cutoff} days in `{loc}`",
            failed=False,
        )

    lines = [f"{FAIL_MARKER} Directories older than {cutoff} days:", "```", *directories, "```"]
    return CheckResult(text="\n".join(lines), failed=True)


def run_check(
    spec: CheckSpec,
    runner: BaseRunner,
    server: ServerConfig,
    client: httpx.Client | None = None,
) -> CheckResult:
    """Dispatch a configured check to its implementation."""
    if isinstance(spec, FolderCountCheck):
        return folder_count(runner, server.name, spec.path, spec.max_folders)
    if isinstance(spec, LoadCheck):
        return load(runner, server.name, spec.interval)
    if isinstance(spec, PingCheck):
        return ping(spec.base_url or f"https://{server.host}", spec.url, client=client)
    if isinstance(spec, TemperatureCheck):
        return temperature(runner, spec.sensor)
    if isinstance(spec, CustomCommandCheck):
        return custom_command(runner, spec.command)
    if isinstance(spec, StaleDirectoriesCheck):
        return stale_directories(runner, spec.loc, spec.cutoff)
    raise TypeError(f"Unsupported check spec: {type(spec).__name__}")
