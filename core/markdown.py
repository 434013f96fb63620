# =============================================================================
# core/markdown.py  —  Markdown table rendering
# =============================================================================

from typing import Iterable, Sequence


def cell(value: object) -> str:
    """Make ``value`` safe to place inside a Markdown table cell."""
    text = str(value).replace("\r", " ").replace("\n", " ")
    return text.replace("|", "\\|")


def table(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    """Render a Markdown table.  Every row must have len(headers) cells."""
    lines = [
        "| " + " | ".join(cell(h) for h in headers) + " |",
        "|" + "---|" * len(headers),
    ]
    for row in rows:
        lines.append("| " + " | ".join(cell(value) for value in row) + " |")
    return "\n".join(lines) + "\n"
