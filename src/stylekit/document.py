"""Hierarchical document nodes, produced from YAML text.

PyYAML composes the text into its node graph; that graph is converted into
a closed set of frozen node types so the rule parser can dispatch on node
shape instead of on Python value types:

- ScalarNode: bool, int, float, str or None (YAML null)
- SequenceNode: ordered items
- MappingNode: ordered (key, value) pairs

Aliases resolve to the anchored node, so ``<<: *base`` yields the base
mapping itself.

PyYAML quirk: plain keys such as ``on:`` or ``yes:`` resolve to booleans
(YAML 1.1). Mapping keys keep their source text instead.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Union

import yaml
from yaml import nodes as yaml_nodes

from stylekit.errors import MalformedDocumentError

MERGE_KEY = "<<"

_MERGE_TAG = "tag:yaml.org,2002:merge"
_BOOL_TAG = "tag:yaml.org,2002:bool"


@dataclass(frozen=True)
class ScalarNode:
    value: bool | int | float | str | None


@dataclass(frozen=True)
class SequenceNode:
    items: tuple["DocumentNode", ...]


@dataclass(frozen=True)
class MappingNode:
    """An ordered mapping; keys are unique."""

    pairs: tuple[tuple["DocumentNode", "DocumentNode"], ...]

    def __iter__(self) -> Iterator[tuple["DocumentNode", "DocumentNode"]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def get(self, key: str) -> "DocumentNode | None":
        """Return the value stored under the string key ``key``."""
        for k, v in self.pairs:
            if isinstance(k, ScalarNode) and k.value == key and isinstance(k.value, str):
                return v
        return None


DocumentNode = Union[ScalarNode, SequenceNode, MappingNode]


class _Converter:
    """Converts a composed PyYAML node graph into DocumentNodes."""

    def __init__(self, loader: yaml.SafeLoader):
        self.loader = loader
        self.converted: dict[int, DocumentNode] = {}
        self.in_progress: set[int] = set()

    def convert(self, node: yaml_nodes.Node, *, is_key: bool = False) -> DocumentNode:
        if isinstance(node, yaml_nodes.ScalarNode):
            return self._scalar(node, is_key)

        node_id = id(node)
        if node_id in self.converted:
            return self.converted[node_id]
        if node_id in self.in_progress:
            raise MalformedDocumentError("Recursive alias in document.")

        self.in_progress.add(node_id)
        try:
            if isinstance(node, yaml_nodes.SequenceNode):
                result: DocumentNode = SequenceNode(
                    tuple(self.convert(item) for item in node.value)
                )
            else:
                result = self._mapping(node)
        finally:
            self.in_progress.discard(node_id)

        self.converted[node_id] = result
        return result

    def _scalar(self, node: yaml_nodes.ScalarNode, is_key: bool) -> ScalarNode:
        if node.tag == _MERGE_TAG:
            return ScalarNode(MERGE_KEY)
        if is_key and node.tag == _BOOL_TAG:
            return ScalarNode(node.value)

        try:
            value: Any = self.loader.construct_object(node)
        except yaml.YAMLError as e:
            raise MalformedDocumentError(str(e)) from e

        if value is None or isinstance(value, (bool, int, float, str)):
            return ScalarNode(value)
        # Timestamps, binary and other tagged scalars keep their source text
        return ScalarNode(str(node.value))

    def _mapping(self, node: yaml_nodes.MappingNode) -> MappingNode:
        pairs: list[tuple[DocumentNode, DocumentNode]] = []
        seen: set[Any] = set()

        for key_node, value_node in node.value:
            key = self.convert(key_node, is_key=True)
            if isinstance(key, ScalarNode):
                marker = (type(key.value), key.value)
                if marker in seen:
                    raise MalformedDocumentError(f"Duplicate key '{key.value}'.")
                seen.add(marker)
            pairs.append((key, self.convert(value_node)))

        return MappingNode(tuple(pairs))


def compose_document(text: str) -> DocumentNode | None:
    """Parse YAML text into a DocumentNode tree.

    Returns:
        The root node, or None for an empty document

    Raises:
        MalformedDocumentError: The text is not valid YAML
    """
    loader = yaml.SafeLoader(text)
    try:
        root = loader.get_single_node()
        if root is None:
            return None
        return _Converter(loader).convert(root)
    except yaml.YAMLError as e:
        raise MalformedDocumentError(f"Invalid YAML: {e}") from e
    finally:
        loader.dispose()
