"""Terminal UI utilities for supascan."""

from __future__ import annotations

import questionary

from supascan.cli.common.tui_style import QUESTIONARY_STYLE_SELECT
from supascan.core.models import CollectionDescriptor

_MAX_COLLECTION_NAME_WIDTH = 72


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _collection_choice_title(
    descriptor: CollectionDescriptor, *, name_width: int
) -> str:
    """Format one choice as `<qualified name>  (<kind>)` with aligned kind column."""
    short_name = _truncate(descriptor.qualified_name, _MAX_COLLECTION_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  ({descriptor.kind.value})"


def select_collections(
    descriptors: list[CollectionDescriptor],
) -> list[CollectionDescriptor]:
    """Display a checkbox prompt to select collections to extract.

    Args:
        descriptors: The discovered collections to choose from.

    Returns:
        The selected collections, or an empty list if none selected.
    """
    shown_names = [
        _truncate(d.qualified_name, _MAX_COLLECTION_NAME_WIDTH) for d in descriptors
    ]
    name_width = max((len(name) for name in shown_names), default=0)

    choices = [
        questionary.Choice(
            title=_collection_choice_title(d, name_width=name_width),
            value=d,
            checked=True,
        )
        for d in descriptors
    ]

    return (
        questionary.checkbox(
            "Select collections to extract:",
            choices=choices,
            style=QUESTIONARY_STYLE_SELECT,
        ).ask()
        or []
    )
