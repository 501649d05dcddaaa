"""Load stylesheets from YAML text.

The document root maps style names to style definitions; each definition
maps rule names to rule values. A definition may inherit the rules of an
anchored definition through the YAML merge key, and override some of them:

    base: &base
      color: "!!color(#333333)"
      size: 12
    title:
      <<: *base
      size: 18

Every call builds a new, immutable ``Stylesheet``; nothing is cached
between loads.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

from stylekit.diagnostics import DiagnosticSink
from stylekit.document import MERGE_KEY, MappingNode, ScalarNode, compose_document
from stylekit.environment import EnvironmentProvider
from stylekit.errors import MalformedDocumentError
from stylekit.rules import Rule, RuleParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stylesheet:
    """An immutable style -> rule name -> Rule table."""

    definitions: Mapping[str, Mapping[str, Rule]]

    def __post_init__(self) -> None:
        frozen = {
            style: MappingProxyType(dict(rules))
            for style, rules in self.definitions.items()
        }
        object.__setattr__(self, "definitions", MappingProxyType(frozen))

    def rule(self, style: str, name: str) -> Rule | None:
        """Return the rule ``name`` of ``style``, or None."""
        rules = self.definitions.get(style)
        if rules is None:
            return None
        return rules.get(name)

    def style(self, style: str) -> Mapping[str, Rule]:
        """Return all rules of ``style`` (empty if unknown)."""
        return self.definitions.get(style, MappingProxyType({}))

    @property
    def styles(self) -> list[str]:
        return list(self.definitions)

    def __contains__(self, style: object) -> bool:
        return style in self.definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)


class StylesheetLoader:
    """Loads stylesheet documents.

    Usage:
        loader = StylesheetLoader(environment, diagnostics)
        sheet = loader.load(text)
        rule = sheet.rule("title", "size")
    """

    def __init__(
        self,
        environment: EnvironmentProvider | None = None,
        diagnostics: DiagnosticSink | None = None,
    ):
        self.parser = RuleParser(environment, diagnostics)

    def load(self, text: str) -> Stylesheet:
        """Parse stylesheet text.

        Raises:
            MalformedDocumentError: The structure is not style -> rule -> value
            IllegalArgumentCountError: A typed literal has the wrong arity
        """
        root = compose_document(text)
        if not isinstance(root, MappingNode):
            raise MalformedDocumentError("The root node should be a map.")

        definitions: dict[str, dict[str, Rule]] = {}
        for key_node, def_node in root:
            if not isinstance(def_node, MappingNode) or not _is_name(key_node):
                raise MalformedDocumentError("Definitions should be maps.")
            definitions[key_node.value] = self._load_definition(key_node.value, def_node)

        logger.debug("Loaded %d style definitions", len(definitions))
        return Stylesheet(definitions)

    def load_path(self, path: Path) -> Stylesheet:
        """Read and parse a stylesheet file."""
        with open(path, encoding="utf-8") as f:
            return self.load(f.read())

    def _load_definition(self, style: str, def_node: MappingNode) -> dict[str, Rule]:
        rules: dict[str, Rule] = {}

        # Inherited rules first, so local rules override them. The base may
        # itself inherit from another base.
        inherited = def_node.get(MERGE_KEY)
        if inherited is not None:
            if not isinstance(inherited, MappingNode):
                raise MalformedDocumentError(
                    f"Style '{style}' inherits from a value that is not a map."
                )
            rules.update(self._load_definition(style, inherited))

        for key_node, value_node in def_node:
            if not _is_name(key_node):
                raise MalformedDocumentError("Invalid rule key.")
            if key_node.value == MERGE_KEY:
                continue
            rules[key_node.value] = self.parser.parse_rule(key_node.value, value_node)

        return rules


def _is_name(node: object) -> bool:
    return isinstance(node, ScalarNode) and isinstance(node.value, str)


def parse(
    text: str,
    environment: EnvironmentProvider | None = None,
    diagnostics: DiagnosticSink | None = None,
) -> Stylesheet:
    """Convenience function to load stylesheet text.

    Example:
        sheet = parse('button: {height: "${idiom == iPad ? 56 : 44}"}')
    """
    return StylesheetLoader(environment, diagnostics).load(text)
