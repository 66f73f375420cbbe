"""Plain-text rendering of lookup records and migration reports."""

from typing import List

from lexicon_hub.domain.lookup.models import LookupRecord
from lexicon_hub.migration.legacy import FullMigrationReport


def render_record(record: LookupRecord) -> str:
    """Render a record for the terminal (no colours, no pager)."""
    lines: List[str] = [f"{record.query}  [{record.origin.label()}]"]

    if not record.found:
        lines.append("  No result found.")
        return "\n".join(lines)

    prons = []
    if record.pronunciation_uk:
        prons.append(f"英 /{record.pronunciation_uk}/")
    if record.pronunciation_us:
        prons.append(f"美 /{record.pronunciation_us}/")
    if not prons and record.pronunciation:
        prons.append(f"/{record.pronunciation}/")
    if prons:
        lines.append("  " + "  ".join(prons))

    if record.rank_label:
        lines.append(f"  {record.rank_label}")

    for translation in record.translations:
        lines.append(f"  {translation}")

    if record.rich_entries:
        lines.append("")
        for index, entry in enumerate(record.rich_entries, start=1):
            head = " ".join(
                part for part in (entry.annotation, entry.primary_translation) if part
            )
            lines.append(f"  {index}. {head}".rstrip())
            for source, target in entry.examples:
                lines.append(f"     {source}")
                lines.append(f"     {target}")
    elif record.examples:
        lines.append("")
        for source, target in record.examples:
            lines.append(f"  {source}")
            lines.append(f"    {target}")

    return "\n".join(lines)


def render_migration_report(report: FullMigrationReport) -> str:
    lines = ["", "=" * 60, "Legacy Migration Results", "=" * 60]
    lines.append(f"Source: {report.source_path}")
    for table in report.reports:
        lines.append(
            f"Table {table.table}: {table.status.value} - "
            f"{table.inserted}/{table.total_rows} inserted, {table.errors} errors"
        )
        if table.plain_payloads:
            lines.append(f"  {table.plain_payloads} rows were stored uncompressed")
    lines.append("-" * 60)
    lines.append(
        f"Total: {report.total_inserted}/{report.total_rows} inserted, "
        f"{report.total_errors} errors"
    )
    lines.append("=" * 60)
    return "\n".join(lines)
