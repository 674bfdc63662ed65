"""Selector construction utilities.

This module provides a small factory function that translates user intent
(CLI arguments) into concrete CollectionSelector instances. It centralizes
validation and composition logic for selectors, so the rest of the
application can work with a single, well-defined selector abstraction.
"""

import re
from typing import Iterable

from supascan.core.selectors import (
    AndSelector,
    CollectionSelector,
    NameRegexSelector,
    NamespaceSelector,
    OrSelector,
)


def build_selector(
    *,
    name: str | None,
    namespaces: Iterable[str],
    use_or: bool,
) -> CollectionSelector:
    """
    Build a composite CollectionSelector from user-provided criteria.

    Args:
        name: Optional regular expression used to match collection names.
        namespaces: Schemas to match (e.g. `public`, `auth`).
        use_or: If True, combine multiple selectors using logical OR.
                If False, combine them using logical AND.

    Returns:
        A CollectionSelector representing the composed selection logic.

    Raises:
        ValueError: If no selectors are provided, a namespace is empty or the
                    name pattern is not a valid regular expression.
    """
    selectors: list[CollectionSelector] = []

    if name:
        try:
            selectors.append(NameRegexSelector(name))
        except re.error as exc:
            raise ValueError(f"Invalid --name pattern '{name}': {exc}") from exc

    for ns in namespaces:
        if not ns.strip():
            raise ValueError("Invalid namespace selector: empty value")
        selectors.append(NamespaceSelector(ns.strip()))

    if not selectors:
        raise ValueError("At least one selector is required (--name or --namespace)")

    if len(selectors) == 1:
        return selectors[0]

    return OrSelector(selectors) if use_or else AndSelector(selectors)
