"""Data models for check results and reports."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

PASS_MARKER = "✅"
FAIL_MARKER = "❌"
NOTICE_MARKER = "⚠️"


def marker(failed: bool) -> str:
    """Sentinel placed at the start of a report line."""
    return FAIL_MARKER if failed else PASS_MARKER


def error_result(message: object) -> "CheckResult":
    """A failed result for a check that could not run."""
    return CheckResult(text=f"{FAIL_MARKER} Error: {message}", failed=True)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check against one server.

    ``text`` may span several lines. ``failed`` is decided by the check that
    produced the text; the aggregator never re-derives it from the markers.
    """

    text: str
    failed: bool
    check_name: str = ""
    server_name: str = ""

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    def to_dict(self) -> dict[str, Any]:
        return {
            "server": self.server_name,
            "check": self.check_name,
            "failed": self.failed,
            "lines": self.lines,
        }


@dataclass
class Report:
    """All results of one run, in deterministic order."""

    results: list[CheckResult] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def lines(self) -> list[str]:
        """Every result split on line breaks, concatenated in order."""
        return [line for result in self.results for line in result.lines]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def has_failure(self) -> bool:
        return any(result.failed for result in self.results)

    @property
    def failed_count(self) -> int:
        return sum(1 for result in self.results if result.failed)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "has_failure": self.has_failure,
            "summary": {
                "total": len(self.results),
                "failed": self.failed_count,
            },
            "results": [r.to_dict() for r in self.results],
        }
