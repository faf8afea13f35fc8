"""Helpers shared by the console and Streamlit renderers."""

from typing import Iterable

from ..core.conversation import Citation


def sources_markdown(sources: Iterable[Citation]) -> str:
    """Render citations as a markdown "Sources" list, labelled by title or uri."""
    sources = list(sources)
    if not sources:
        return ""
    lines = ["**Sources:**"]
    for source in sources:
        lines.append(f"- [{source.label}]({source.uri})")
    return "\n".join(lines)
