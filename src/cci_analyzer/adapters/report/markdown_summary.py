"""Markdown summary of a CCI analysis."""

from cci_analyzer.core import CCIPage, PageEntry, ReportGenerator


class MarkdownSummaryGenerator(ReportGenerator):
    """Generate a markdown summary of minor and major diffs per article."""

    def __init__(self, title: str = "CCI analysis", spot_check_size: int = 500) -> None:
        self.title = title
        self.spot_check_size = spot_check_size

    def generate(self, page: CCIPage) -> str:
        """Generate markdown summary."""
        if not page.page_entries:
            return f"# {self.title}\n\nNo articles found in the listing."

        lines = [
            f"# {self.title}",
            "",
            f"Articles: {len(page.page_entries)}",
            f"Diffs: {page.diff_count}",
            f"Minor diffs: {len(page.minor_edits)}",
            "",
            "## Articles",
            "",
            "| Article | New page | Diffs | Minor |",
            "|---|---|---|---|",
        ]
        flags = iter(page.minor_flags)
        for entry in page.page_entries:
            minor_count = sum(1 for _ in entry.diff_identifiers if next(flags, False))
            lines.append(self._format_entry(entry, minor_count))
        lines.append("")

        # Large diffs judged minor deserve a second look.
        spot_checks = [
            ref for ref in page.minor_edits
            if ref in page.records
            and (page.records[ref].size or 0) >= self.spot_check_size
        ]
        if spot_checks:
            lines.extend([
                f"## Minor diffs of {self.spot_check_size} bytes or more",
                "",
            ])
            for ref in spot_checks:
                lines.append(f"- `{ref}`")
            lines.append("")

        failed = page.failed_fetches()
        if failed:
            lines.extend([
                "## Diffs that could not be fetched",
                "",
            ])
            for ref in failed:
                lines.append(f"- `{ref}`")
            lines.append("")

        return "\n".join(lines)

    def _format_entry(self, entry: PageEntry, minor_count: int) -> str:
        new_page = "yes" if entry.is_new_page else ""
        return f"| {entry.title} | {new_page} | {len(entry.diff_identifiers)} | {minor_count} |"
