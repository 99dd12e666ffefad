"""Markdown run reports for batch jobs."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class PipelineLogger:
    """Collect per-item outcomes of a job and write them as a timestamped markdown report."""

    def __init__(self, job_name: str, log_dir: Path = Path("data/logs")):
        """Initialize the report for a job.

        Args:
            job_name: Name of the job (e.g., "parse", "reparse")
            log_dir: Directory for report files
        """
        self.job_name = job_name
        self.log_dir = log_dir
        self.start_time = datetime.now(tz=timezone.utc)

        # YYYY-MM-DD-HH-MM-job.md
        timestamp = self.start_time.strftime("%Y-%m-%d-%H-%M")
        self.log_path = log_dir / f"{timestamp}-{job_name}.md"

        self.successful: list[str] = []
        self.failed: list[tuple[str, str]] = []
        self.skipped: list[str] = []
        self.dropped: list[tuple[str, str]] = []
        self.details: list[str] = []

    def log_success(self, item: str, details: str = "") -> None:
        """Record a processed item.

        Args:
            item: Item identifier (patch id, character name)
            details: Short summary of what was done
        """
        self.successful.append(f"- ✅ {item}: {details}" if details else f"- ✅ {item}")

    def log_failure(self, item: str, error: str) -> None:
        """Record an item that failed; the job carries on with the next one.

        Args:
            item: Item identifier
            error: Error message
        """
        self.failed.append((item, error))

    def log_skip(self, item: str, reason: str = "") -> None:
        """Record an item that needed no work.

        Args:
            item: Item identifier
            reason: Why it was skipped
        """
        self.skipped.append(f"- ⊘ {item}: {reason}" if reason else f"- ⊘ {item}")

    def log_dropped(self, item: str, line: str) -> None:
        """Record a change line no extraction pattern could split.

        Args:
            item: Where the line came from (character @ patch)
            line: The raw line text
        """
        self.dropped.append((item, line))

    def log_detail(self, message: str) -> None:
        """Add a free-form line to the details section."""
        self.details.append(message)

    def write(self, additional_summary: dict[str, Any] | None = None) -> Path:
        """Write the report.

        Args:
            additional_summary: Extra summary lines (label -> value)

        Returns:
            Path to the written report
        """
        end_time = datetime.now(tz=timezone.utc)
        duration = end_time - self.start_time
        duration_str = f"{int(duration.total_seconds() // 60)}m {int(duration.total_seconds() % 60)}s"

        lines = [
            f"# {self.job_name.capitalize()} Report - {self.start_time.strftime('%Y-%m-%d %H:%M:%S')} UTC",
            "",
            f"**Started:** {self.start_time.strftime('%Y-%m-%d %H:%M:%S')} UTC",
            f"**Duration:** {duration_str}",
            "",
            "## Summary",
            f"- ✅ {len(self.successful)} successful",
            f"- ❌ {len(self.failed)} failed",
            f"- ⊘ {len(self.skipped)} skipped",
            f"- ✂ {len(self.dropped)} dropped lines",
        ]

        if additional_summary:
            for key, value in additional_summary.items():
                lines.append(f"- {key}: {value}")

        lines.append("")

        if self.successful:
            lines.append("## Successful")
            lines.extend(self.successful)
            lines.append("")

        if self.failed:
            lines.append("## Failed")
            for item, error in self.failed:
                lines.append(f"- ❌ {item}")
                for error_line in error.split("\n"):
                    lines.append(f"  {error_line}")
            lines.append("")

        if self.skipped:
            lines.append("## Skipped")
            lines.extend(self.skipped)
            lines.append("")

        if self.dropped:
            lines.append("## Dropped Lines")
            for item, line in self.dropped:
                lines.append(f"- {item}: `{line}`")
            lines.append("")

        if self.details:
            lines.append("## Details")
            lines.extend(self.details)
            lines.append("")

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_path.write_text("\n".join(lines), encoding="utf-8")

        return self.log_path
