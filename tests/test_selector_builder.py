import pytest

from supascan.cli.common.selector_builder import build_selector
from supascan.core.selectors import (
    AndSelector,
    NameRegexSelector,
    NamespaceSelector,
    OrSelector,
)


def test_build_selector_name_only():
    selector = build_selector(name="orders", namespaces=[], use_or=False)

    assert isinstance(selector, NameRegexSelector)


def test_build_selector_namespace_only():
    selector = build_selector(name=None, namespaces=["auth"], use_or=False)

    assert isinstance(selector, NamespaceSelector)


def test_build_selector_combined_and_or():
    and_selector = build_selector(name="orders", namespaces=["public"], use_or=False)
    or_selector = build_selector(name="orders", namespaces=["public"], use_or=True)

    assert isinstance(and_selector, AndSelector)
    assert isinstance(or_selector, OrSelector)


def test_build_selector_requires_a_criterion():
    with pytest.raises(ValueError, match="At least one selector"):
        build_selector(name=None, namespaces=[], use_or=False)


def test_build_selector_invalid_regex():
    with pytest.raises(ValueError, match="Invalid --name pattern"):
        build_selector(name="(", namespaces=[], use_or=False)


def test_build_selector_empty_namespace():
    with pytest.raises(ValueError):
        build_selector(name=None, namespaces=[" "], use_or=False)
