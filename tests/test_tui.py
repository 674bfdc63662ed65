from supascan.cli.common.tui_style import (
    QUESTIONARY_STYLE_CONFIRM,
    QUESTIONARY_STYLE_SECRET,
    QUESTIONARY_STYLE_SELECT,
)
from supascan.cli.tui import (
    _MAX_COLLECTION_NAME_WIDTH,
    _collection_choice_title,
    _truncate,
)
from supascan.core.models import CollectionDescriptor, CollectionKind


def test_collection_choice_title_shows_name_before_kind_and_aligns():
    first = _collection_choice_title(CollectionDescriptor(name="orders"), name_width=12)
    second = _collection_choice_title(
        CollectionDescriptor(name="v_sales", kind=CollectionKind.VIEW), name_width=12
    )

    assert first.startswith("orders")
    assert second.startswith("v_sales")
    assert first.index("(") == second.index("(")
    assert second.endswith("(VIEW)")


def test_collection_choice_title_truncates_long_names():
    long_name = "x" * (_MAX_COLLECTION_NAME_WIDTH + 10)
    rendered = _collection_choice_title(
        CollectionDescriptor(name=long_name),
        name_width=_MAX_COLLECTION_NAME_WIDTH,
    )

    assert "..." in rendered
    assert "(BASE TABLE)" in rendered
    assert _truncate(long_name, _MAX_COLLECTION_NAME_WIDTH).endswith("...")


def test_prompt_styles_share_base_and_differ_in_accent():
    select = dict(QUESTIONARY_STYLE_SELECT.style_rules)
    confirm = dict(QUESTIONARY_STYLE_CONFIRM.style_rules)
    secret = dict(QUESTIONARY_STYLE_SECRET.style_rules)

    assert select["checkbox-selected"] == "bold ansigreen"
    assert "checkbox-selected" not in confirm
    assert confirm["question"] == "bold ansiyellow"
    assert secret["answer"] == "ansibrightblack"
    assert select["error"] == confirm["error"] == secret["error"]
