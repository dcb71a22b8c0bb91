"""
Markdown rendering of a built itinerary and its validation warnings.
"""

from datetime import date
from typing import List

from tripdocs.shared.contracts.trip import DayRow


TITLE = "# Your Trip Itinerary"
TABLE_HEADER = "| Date | Day | Lodging | Flights | Car |"
TABLE_SEPARATOR = "|------|-----|---------|---------|-----|"
EMPTY_CELL = "-"


def build_markdown_content(rows: List[DayRow], warnings: List[str]) -> str:
    """
    Render the itinerary as a markdown document.

    Args:
        rows: Day rows from build_itinerary
        warnings: Messages from validate_itinerary

    Returns:
        Markdown with a duration summary, a day table, and a warnings section
    """
    lines: List[str] = [TITLE, ""]

    if rows:
        first, last = rows[0].date, rows[-1].date
        day_word = "day" if len(rows) == 1 else "days"
        lines.append(f"**Trip Duration:** {first} to {last} ({len(rows)} {day_word})")
        lines.append("")

    lines.append("## Daily Itinerary")
    lines.append("")

    if rows:
        lines.append(TABLE_HEADER)
        lines.append(TABLE_SEPARATOR)
        for row in rows:
            lines.append(_table_row(row))
    else:
        lines.append("*No itinerary data available.*")
    lines.append("")

    lines.append("## Validation Warnings")
    lines.append("")
    if warnings:
        lines.append("⚠️ **Please review the following:**")
        lines.append("")
        lines.extend(f"- {warning}" for warning in warnings)
    else:
        lines.append("✅ **None** - Your itinerary looks good!")
    lines.append("")

    return "\n".join(lines)


def _table_row(row: DayRow) -> str:
    day = date.fromisoformat(row.date)
    cells = [
        f"{day.strftime('%b')} {day.day}, {day.year}",
        day.strftime("%a"),
        _cell(row.hotels),
        _cell(row.flights),
        _cell(row.cars),
    ]
    return "| " + " | ".join(cells) + " |"


def _cell(items: List[str]) -> str:
    if not items:
        return EMPTY_CELL
    return "<br>".join(item.replace("|", "\\|") for item in items)
