"""Core check orchestration and report aggregation."""

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable

import httpx

from remote_sys_monitor.checks import run_check
from remote_sys_monitor.config import Config, ServerConfig
from remote_sys_monitor.models import CheckResult, Report
from remote_sys_monitor.notifiers import BaseNotifier
from remote_sys_monitor.runners import BaseRunner, create_runner

logger = logging.getLogger(__name__)


class Monitor:
    """Main check orchestrator."""

    def __init__(
        self,
        config: Config,
        notifiers: list[BaseNotifier] | None = None,
        runner_factory: Callable[[ServerConfig], BaseRunner] = create_runner,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize monitor.

        Args:
            config: Configuration object.
            notifiers: Notifiers that receive the report.
            runner_factory: Builds the command runner for a server.
            http_client: Client used by ping checks; one is created per run
                when omitted.
        """
        self.config = config
        self.notifiers = notifiers or []
        self.runner_factory = runner_factory
        self.http_client = http_client

    def check_server(
        self,
        server: ServerConfig,
        client: httpx.Client | None = None,
    ) -> list[CheckResult]:
        """Run every check of one server, in check-name order.

        The server's session stays open for all of its checks and is closed
        afterwards, whether or not they succeed.

        Raises:
            RemoteConnectionError: if the session cannot be established.
        """
        logger.info(f"Checking server: {server.name}")
        results = []
        with self.runner_factory(server) as runner:
            for check_name, spec in server.sorted_checks():
                logger.debug(f"Running check {check_name} ({spec.kind}) on {server.name}")
                result = run_check(spec, runner, server, client=client)
                results.append(
                    dataclasses.replace(result, check_name=check_name, server_name=server.name)
                )
        return results

    def run(self) -> Report:
        """Check all enabled servers and build the report.

        Servers appear in configuration order even when checked in parallel.
        A server that cannot be reached aborts the whole run.
        """
        servers = self.config.get_enabled_servers()
        if not servers:
            logger.warning("No enabled servers configured")
            return Report(results=[], timestamp=datetime.now())

        client = self.http_client or httpx.Client(
            timeout=self.config.http_timeout,
            follow_redirects=True,
        )
        try:
            if self.config.parallel_checks and len(servers) > 1:
                with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                    per_server = list(
                        executor.map(lambda s: self.check_server(s, client), servers)
                    )
            else:
                per_server = [self.check_server(server, client) for server in servers]
        finally:
            if self.http_client is None:
                client.close()

        results = [result for server_results in per_server for result in server_results]
        report = Report(results=results, timestamp=datetime.now())
        logger.info(
            f"Finished {len(results)} checks on {len(servers)} servers, {report.failed_count} failed"
        )
        return report

    def notify(self, report: Report, force: bool = False) -> bool:
        """Send the report if it has a failure or ``force`` is set.

        Returns:
            True if the report was handed to the notifiers.
        """
        if not (report.has_failure or force):
            return False

        text = report.text
        for notifier in self.notifiers:
            if not notifier.send_report(text, report.has_failure):
                logger.error(f"Delivery through {notifier.name} failed")
        return True
