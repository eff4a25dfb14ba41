"""Text and table rendering of version reports."""

from typing import List, Sequence

from rich.console import Console
from rich.table import Table

from flutterdeploy.versioning import (
    Comparison,
    ExtractionResult,
    ReconciliationReport,
    VersionSource,
)

_ICONS = {
    VersionSource.MANIFEST: "📄",
    VersionSource.ANDROID_DESCRIPTOR: "🤖",
    VersionSource.IOS_PLIST: "🍎",
    VersionSource.IOS_PROJECT: "🍎",
    VersionSource.GOOGLE_PLAY: "🤖",
    VersionSource.APP_STORE: "🍎",
}

_VERDICTS = {
    Comparison.HIGHER: "✅ Local version is ahead of the stores, no new version needed",
    Comparison.EQUAL: "⚠️  Local version is already published, a new build number is needed",
    Comparison.LOWER: "⚠️  Local version is behind the stores",
}


def _result_line(result: ExtractionResult) -> str:
    icon = _ICONS.get(result.source, "•")
    return f"  {icon} {result.source.label + ':':<22} {result.describe()}"


def format_report(report: ReconciliationReport) -> List[str]:
    """Lines describing a reconciliation, in reading order."""
    lines = ["📊 Local versions:"]
    lines.extend(_result_line(r) for r in report.local_results)

    if report.store_results:
        lines.append("")
        lines.append("🏪 Store versions:")
        lines.extend(_result_line(r) for r in report.store_results)

    lines.append("")
    lines.append(f"📋 Current version: {report.canonical}")

    if report.classification is None:
        if report.store_results:
            lines.append("ℹ️  No store version available, comparison skipped")
        if report.cached_store:
            lines.append(f"   Last store version seen: {report.cached_store} (cached)")
        return lines

    lines.append(f"🏪 Highest store version: {report.highest_store}")
    lines.append(_VERDICTS[report.classification])
    if report.recommended is not None:
        lines.append(f"💡 Recommended version: {report.recommended}")
    if report.applied:
        updated = ", ".join(s.label for s in report.written)
        lines.append(f"✅ Version {report.recommended} applied to: {updated}")
    return lines


def print_status_table(results: Sequence[ExtractionResult], canonical=None, console=None):
    """Render local versions as a table; mismatches with *canonical* are highlighted."""
    console = console or Console()
    table = Table(title="Version status", show_lines=False)
    table.add_column("Source")
    table.add_column("File")
    table.add_column("Version")
    table.add_column("Note")

    for result in results:
        if result.ok:
            style = "green" if canonical is None or result.parsed == canonical else "yellow"
            version = f"[{style}]{result.parsed}[/{style}]"
            note = ""
        else:
            version = "[dim]-[/dim]"
            note = f"{result.error.value}: {result.detail or ''}".rstrip(": ")
        path = str(result.path) if result.path is not None else ""
        table.add_row(result.source.label, path, version, note)

    console.print(table)
