"""
Compilation: the resolved view over every parsed declaration.

Holds compilation units and named type symbols, resolves base type references the
way the C# binder does for simple cases (enclosing namespaces, then using directives),
and computes transitive interface sets over an inheritance graph.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import networkx as nx

from nullobjgen.symbols.model import (
    CompilationUnit,
    NamedTypeSymbol,
    SourceLocation,
    TypeKind,
    split_generic_name,
    split_type_arguments,
    substitute_type_parameters,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterfaceReference:
    """
    An interface in a type's interface set, with the name used to declare conformance.

    For a constructed interface such as IRepo<int>, substitutions maps the declared
    type parameters to the type arguments ({'T': 'int'}).
    """

    symbol: NamedTypeSymbol
    display_name: str
    substitutions: dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> str:
        return _symbol_key(self.symbol)

    def substitute(self, type_text: str, shadowed: list[str] | None = None) -> str:
        """Spell a member type of this interface as seen through the constructed reference."""
        mapping = self.substitutions
        if shadowed:
            mapping = {k: v for k, v in mapping.items() if k not in shadowed}
        return substitute_type_parameters(type_text, mapping)


def _symbol_key(symbol: NamedTypeSymbol) -> str:
    parts = [symbol.namespace] if symbol.namespace else []
    parts.extend(symbol.containing_types)
    parts.append(symbol.metadata_name)
    return ".".join(parts)


def _lookup_key(qualified_name: str, arity: int) -> str:
    return f"{qualified_name}`{arity}" if arity else qualified_name


class Compilation:
    """
    All units and type symbols of one generation run.

    Usage:
        compilation = Compilation()
        compilation.add_unit(unit)
        compilation.add_type(symbol)

        interfaces = compilation.all_interfaces(symbol)
        usings = compilation.usings_for(interfaces[0].symbol.location)
    """

    def __init__(self):
        self._units: dict[Path, CompilationUnit] = {}
        self._types: dict[str, NamedTypeSymbol] = {}
        self._unnamed: list[NamedTypeSymbol] = []
        self._graph: nx.DiGraph | None = None
        self._unresolved: dict[str, list[str]] = {}

    # =========================================================================
    # Population
    # =========================================================================

    def add_unit(self, unit: CompilationUnit) -> None:
        self._units[unit.path] = unit

    def add_type(self, symbol: NamedTypeSymbol) -> NamedTypeSymbol:
        """
        Register a type symbol, merging it into an earlier partial declaration.

        Returns:
            The symbol stored in the compilation (the merged one for partial types)
        """
        self._graph = None
        key = _symbol_key(symbol)
        existing = self._types.get(key)
        if existing is None:
            self._types[key] = symbol
            return symbol

        logger.debug(f"Merging partial declaration of {symbol.display_name}")
        for base in symbol.base_types:
            if base not in existing.base_types:
                existing.base_types.append(base)
        for modifier in symbol.modifiers:
            if modifier not in existing.modifiers:
                existing.modifiers.append(modifier)
        if not existing.type_parameters and symbol.type_parameters:
            existing.type_parameters = symbol.type_parameters
        existing.constraints.extend(c for c in symbol.constraints if c not in existing.constraints)
        existing.members.extend(symbol.members)
        existing.unsupported_members.extend(symbol.unsupported_members)
        existing.attributes.extend(symbol.attributes)
        existing.locations.extend(symbol.locations)
        if _declares_accessibility(symbol.modifiers):
            existing.accessibility = symbol.accessibility
        return existing

    def add_unnamed(self, symbol: NamedTypeSymbol) -> None:
        """Keep a declaration whose name could not be read, so discovery can report it."""
        self._unnamed.append(symbol)

    @property
    def units(self) -> list[CompilationUnit]:
        return list(self._units.values())

    @property
    def types(self) -> list[NamedTypeSymbol]:
        return list(self._types.values())

    @property
    def unnamed_types(self) -> list[NamedTypeSymbol]:
        return list(self._unnamed)

    def get_type(self, qualified_name: str, arity: int = 0) -> NamedTypeSymbol | None:
        return self._types.get(_lookup_key(qualified_name, arity))

    def unit_for(self, location: SourceLocation | None) -> CompilationUnit | None:
        if location is None or location.path is None:
            return None
        return self._units.get(location.path)

    def usings_for(self, location: SourceLocation | None) -> list[str]:
        """Using directives of the unit that contains a location."""
        unit = self.unit_for(location)
        return list(unit.usings) if unit else []

    # =========================================================================
    # Name Resolution
    # =========================================================================

    def resolve(self, reference: str, context: NamedTypeSymbol) -> NamedTypeSymbol | None:
        """
        Resolve a type reference written inside a declaration.

        Args:
            reference: The reference as written, e.g. 'IHoge', 'Game.IRepo<int>'
            context: The declaration whose base list contains the reference

        Returns:
            The referenced symbol, or None when it is not part of this compilation
        """
        name, type_args = split_generic_name(reference)
        arity = len(split_type_arguments(type_args)) if type_args else 0

        for candidate in self._candidate_names(name, context):
            symbol = self._types.get(_lookup_key(candidate, arity))
            if symbol is not None:
                return symbol
        return None

    def _candidate_names(self, name: str, context: NamedTypeSymbol) -> list[str]:
        candidates: list[str] = []

        # Enclosing types, innermost first
        scope = [context.namespace] if context.namespace else []
        for depth in range(len(context.containing_types), 0, -1):
            prefix = scope + context.containing_types[:depth]
            candidates.append(".".join(prefix + [name]))

        # Enclosing namespaces, innermost first, ending at the global namespace
        namespace_parts = context.namespace.split(".") if context.namespace else []
        for depth in range(len(namespace_parts), -1, -1):
            candidates.append(".".join(namespace_parts[:depth] + [name]))

        # Using directives of every unit declaring the context
        for location in context.locations:
            for using in self.usings_for(location):
                if using.startswith("static "):
                    continue
                if "=" in using:
                    alias, target = (part.strip() for part in using.split("=", 1))
                    if name == alias:
                        candidates.append(split_generic_name(target)[0])
                    elif name.startswith(alias + "."):
                        candidates.append(target + name[len(alias):])
                    continue
                candidates.append(f"{using}.{name}")

        return candidates

    # =========================================================================
    # Inheritance
    # =========================================================================

    def inheritance_graph(self) -> nx.DiGraph:
        """
        Build the inheritance graph.

        Nodes are symbol keys; an edge u -> v means u lists v in its base list.
        Edges carry the reference text so closed generic names survive.
        """
        if self._graph is not None:
            return self._graph

        graph = nx.DiGraph()
        self._unresolved = {}
        for key, symbol in self._types.items():
            graph.add_node(key, symbol=symbol)

        for key, symbol in self._types.items():
            for reference in symbol.base_types:
                base = self.resolve(reference, symbol)
                if base is None:
                    logger.debug(f"Unresolved base '{reference}' on {symbol.display_name}")
                    self._unresolved.setdefault(key, []).append(reference)
                    continue
                base_key = _symbol_key(base)
                if base_key == key or graph.has_edge(key, base_key):
                    continue
                graph.add_edge(key, base_key, reference=reference)

        self._graph = graph
        return graph

    def unresolved_bases(self, symbol: NamedTypeSymbol) -> list[str]:
        """Base references of a symbol that did not resolve inside this compilation."""
        self.inheritance_graph()
        return list(self._unresolved.get(_symbol_key(symbol), []))

    def all_interfaces(self, symbol: NamedTypeSymbol) -> list[InterfaceReference]:
        """
        Transitive interface set of a type, excluding the type itself.

        Classes inherit the interfaces of their resolved base classes. The order is a
        depth-first pre-order over base lists in declaration order; each interface
        appears once no matter how many paths reach it.

        Type arguments flow down the walk: for 'class Store : IA<int>' with
        'interface IA<T> : IB<T>', IB is reported as IB<int>.
        """
        graph = self.inheritance_graph()
        root = _symbol_key(symbol)
        if root not in graph:
            return []

        substitutions: dict[str, dict[str, str]] = {root: {}}
        interfaces: list[InterfaceReference] = []
        for parent, child in nx.dfs_edges(graph, source=root):
            base = graph.nodes[child]["symbol"]
            reference = graph.edges[parent, child]["reference"]
            _, type_args = split_generic_name(reference)
            arguments = [
                substitute_type_parameters(arg, substitutions[parent])
                for arg in split_type_arguments(type_args)
            ] if type_args else []
            substitutions[child] = dict(zip(base.type_parameter_names, arguments))

            if base.kind != TypeKind.INTERFACE:
                continue
            display_name = base.qualified_name
            if arguments:
                display_name += f"<{', '.join(arguments)}>"
            interfaces.append(
                InterfaceReference(
                    symbol=base, display_name=display_name, substitutions=substitutions[child]
                )
            )
        return interfaces


def _declares_accessibility(modifiers: list[str]) -> bool:
    return any(m in modifiers for m in ("public", "internal", "protected", "private"))
