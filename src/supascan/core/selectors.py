import re
from abc import ABC, abstractmethod
from typing import Iterable

from supascan.core.models import CollectionDescriptor


class CollectionSelector(ABC):
    @abstractmethod
    def matches(self, descriptor: CollectionDescriptor) -> bool: ...


class NameRegexSelector(CollectionSelector):
    def __init__(self, pattern: str):
        self.regex = re.compile(pattern)

    def matches(self, descriptor: CollectionDescriptor) -> bool:
        return bool(self.regex.search(descriptor.name))


class NamespaceSelector(CollectionSelector):
    def __init__(self, namespace: str):
        self.namespace = namespace

    def matches(self, descriptor: CollectionDescriptor) -> bool:
        return descriptor.namespace == self.namespace


class AndSelector(CollectionSelector):
    def __init__(self, selectors: list[CollectionSelector]):
        self.selectors = selectors

    def matches(self, descriptor: CollectionDescriptor) -> bool:
        return all(s.matches(descriptor) for s in self.selectors)


class OrSelector(CollectionSelector):
    def __init__(self, selectors: list[CollectionSelector]):
        self.selectors = selectors

    def matches(self, descriptor: CollectionDescriptor) -> bool:
        return any(s.matches(descriptor) for s in self.selectors)


def select_collections(
    descriptors: Iterable[CollectionDescriptor], selector: CollectionSelector
) -> list[CollectionDescriptor]:
    return [d for d in descriptors if selector.matches(d)]
