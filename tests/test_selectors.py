from supascan.core.models import CollectionDescriptor
from supascan.core.selectors import (
    AndSelector,
    NameRegexSelector,
    NamespaceSelector,
    OrSelector,
    select_collections,
)

ORDERS = CollectionDescriptor(name="orders")
USERS = CollectionDescriptor(name="users", namespace="auth")
ORDER_ITEMS = CollectionDescriptor(name="order_items")


def test_name_regex_selector_searches_name():
    selector = NameRegexSelector("^order")

    assert selector.matches(ORDERS)
    assert selector.matches(ORDER_ITEMS)
    assert not selector.matches(USERS)


def test_namespace_selector():
    assert NamespaceSelector("auth").matches(USERS)
    assert not NamespaceSelector("auth").matches(ORDERS)


def test_and_or_selectors():
    name = NameRegexSelector("s$")
    auth = NamespaceSelector("auth")

    assert AndSelector([name, auth]).matches(USERS)
    assert not AndSelector([name, auth]).matches(ORDERS)
    assert OrSelector([name, auth]).matches(ORDERS)
    assert not OrSelector([NameRegexSelector("^x"), auth]).matches(ORDERS)


def test_select_collections_keeps_order():
    selected = select_collections(
        [ORDER_ITEMS, USERS, ORDERS], NameRegexSelector("order")
    )

    assert selected == [ORDER_ITEMS, ORDERS]
