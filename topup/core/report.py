"""Per-run report: ordered step outcomes, summary text and exit code."""

from dataclasses import dataclass
from typing import Dict, List

from .errors import ReportClosedError
from .outcome import NOT_INSTALLED, Outcome, Status

EXIT_OK = 0
EXIT_FAILURE = 1
# Click already uses 2 for usage errors
EXIT_FATAL = 3

_GROUPS = (
    (Status.SUCCESS, "Succeeded"),
    (Status.FAILURE, "Failed"),
    (Status.SKIPPED, "Skipped"),
    (Status.IGNORED, "Ignored"),
)


@dataclass(frozen=True)
class ReportEntry:
    name: str
    outcome: Outcome
    duration: float


class Report:
    """Append-only log of step outcomes in execution order.

    The runner records one entry per registry step and closes the report
    when it reaches its final state. After that the report is read-only and
    ``render`` always returns the same text.
    """

    def __init__(self):
        self._entries: List[ReportEntry] = []
        self._closed = False
        self.aborted = False

    def record(self, name: str, outcome: Outcome, duration: float = 0.0) -> None:
        if self._closed:
            raise ReportClosedError(f"Cannot record {name!r}: report is closed")
        self._entries.append(ReportEntry(name, outcome, duration))

    def close(self, aborted: bool = False) -> None:
        self.aborted = self.aborted or aborted
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def entries(self) -> List[ReportEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def by_status(self) -> Dict[Status, List[ReportEntry]]:
        groups: Dict[Status, List[ReportEntry]] = {status: [] for status, _ in _GROUPS}
        for entry in self._entries:
            groups[entry.outcome.status].append(entry)
        return groups

    @property
    def failures(self) -> List[ReportEntry]:
        return self.by_status()[Status.FAILURE]

    @property
    def successes(self) -> List[ReportEntry]:
        return self.by_status()[Status.SUCCESS]

    @property
    def skipped(self) -> List[ReportEntry]:
        return self.by_status()[Status.SKIPPED]

    @property
    def ignored(self) -> List[ReportEntry]:
        return self.by_status()[Status.IGNORED]

    @property
    def elapsed(self) -> float:
        """Total time spent in steps, in seconds."""
        return sum(entry.duration for entry in self._entries)

    @property
    def exit_code(self) -> int:
        if self.aborted:
            return EXIT_FATAL
        if self.failures:
            return EXIT_FAILURE
        return EXIT_OK

    def render(self, show_skipped: bool = False) -> str:
        """Render the summary grouped by status.

        With ``show_skipped`` off, steps whose tool is not installed and
        ignored steps are folded into a single count line.
        """
        groups = self.by_status()
        hidden = 0
        lines: List[str] = []

        for status, title in _GROUPS:
            entries = groups[status]
            if not show_skipped:
                shown = [e for e in entries if not _is_quiet(e)]
                hidden += len(entries) - len(shown)
                entries = shown
            if not entries:
                continue

            lines.append(f"{title} ({len(entries)}):")
            for entry in entries:
                lines.append(_format_entry(entry))

        if hidden:
            lines.append(f"{hidden} step(s) not installed or ignored")

        counts = ", ".join(
            f"{len(groups[status])} {title.lower()}" for status, title in _GROUPS if groups[status]
        )
        lines.append(f"Total: {len(self._entries)} step(s)" + (f" ({counts})" if counts else ""))
        lines.append(f"Elapsed: {format_duration(self.elapsed)}")
        if self.aborted:
            lines.append("Run aborted")
        return "\n".join(lines)


def _is_quiet(entry: ReportEntry) -> bool:
    status = entry.outcome.status
    return status is Status.IGNORED or (status is Status.SKIPPED and entry.outcome.reason == NOT_INSTALLED)


def _format_entry(entry: ReportEntry) -> str:
    line = f"  {entry.name}"
    if entry.outcome.status in (Status.SUCCESS, Status.FAILURE):
        line += f" [{format_duration(entry.duration)}]"
    reason = entry.outcome.reason
    if reason:
        first, _, rest = reason.partition("\n")
        line += f": {first}"
        for extra in rest.splitlines():
            line += f"\n      {extra}"
    return line


def format_duration(seconds: float) -> str:
    """``75.2`` -> ``"1m15s"``, ``3.04`` -> ``"3.0s"``."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(round(seconds)), 60)
    if minutes < 60:
        return f"{minutes}m{secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h{minutes:02d}m{secs:02d}s"
