"""
C# language plugin.

Handles C# parsing with tree-sitter, symbol extraction for type declarations and
interface members, marker discovery, and the marker attribute source.
"""

import logging
import re
from pathlib import Path
from typing import Any

from nullobjgen.config.models import MarkerConfig
from nullobjgen.languages.base.plugin import LanguagePlugin
from nullobjgen.symbols.compilation import Compilation
from nullobjgen.symbols.model import (
    Accessibility,
    AttributeData,
    CompilationUnit,
    GenerationTarget,
    MarkerKind,
    MethodSymbol,
    NamedTypeSymbol,
    ParameterMode,
    ParameterSymbol,
    PropertySymbol,
    SourceLocation,
    TypeKind,
)

logger = logging.getLogger(__name__)

_TYPE_DECLARATIONS = {
    "class_declaration": TypeKind.CLASS,
    "interface_declaration": TypeKind.INTERFACE,
    "struct_declaration": TypeKind.STRUCT,
    "record_declaration": TypeKind.RECORD,
    "record_struct_declaration": TypeKind.STRUCT,
}

_UNSUPPORTED_MEMBERS = {
    "indexer_declaration": "indexer",
    "event_declaration": "event",
    "event_field_declaration": "event",
}

_USING = re.compile(r"^(?:global\s+)?using\s+(.*?)\s*;?$", re.DOTALL)


def _join(namespace: str | None, name: str | None) -> str | None:
    if not name:
        return namespace
    return f"{namespace}.{name}" if namespace else name


def _squash(text: str) -> str:
    return " ".join(text.split())


class CSharpPlugin(LanguagePlugin):
    """C# language plugin using tree-sitter for parsing."""

    def __init__(self, version: str = "12"):
        self.version = version
        self._parser = None

    # =========================================================================
    # Plugin Metadata
    # =========================================================================

    @property
    def language_name(self) -> str:
        return "csharp"

    @property
    def supported_versions(self) -> list[str]:
        return ["9", "10", "11", "12"]

    @property
    def file_extensions(self) -> list[str]:
        return [".cs"]

    # =========================================================================
    # AST Parsing (using tree-sitter)
    # =========================================================================

    def _get_parser(self):
        """Lazy initialization of tree-sitter parser."""
        if self._parser is None:
            try:
                import tree_sitter_c_sharp as tscsharp
                from tree_sitter import Language, Parser

                CSHARP_LANGUAGE = Language(tscsharp.language())
                self._parser = Parser(CSHARP_LANGUAGE)
            except ImportError:
                raise RuntimeError(
                    "tree-sitter-c-sharp not installed. Run: pip install tree-sitter-c-sharp"
                )
        return self._parser

    def parse_file(self, file_path: Path) -> Any:
        """Parse a C# file into a tree-sitter AST."""
        with open(file_path, "rb") as f:
            source = f.read()
        return self.parse_source(source.decode("utf-8-sig"))

    def parse_source(self, source_code: str) -> Any:
        """Parse C# source code into a tree-sitter AST."""
        parser = self._get_parser()
        return parser.parse(bytes(source_code, "utf-8"))

    # =========================================================================
    # Symbols
    # =========================================================================

    def add_source(self, compilation: Compilation, source_code: str, path: Path) -> None:
        """Parse one C# source and register its unit and type declarations."""
        tree = self.parse_source(source_code)
        if tree.root_node.has_error:
            logger.warning(f"{path}: syntax errors found, declarations may be incomplete")

        unit = CompilationUnit(path=path)
        _UnitWalker(compilation, unit).walk(tree.root_node)
        compilation.add_unit(unit)
        logger.debug(f"Parsed {path}: {len(unit.usings)} usings, namespaces {unit.namespaces}")

    def discover_targets(
        self, compilation: Compilation, markers: MarkerConfig
    ) -> list[GenerationTarget]:
        """Find classes and interfaces carrying a null object marker attribute."""
        targets: list[GenerationTarget] = []

        for symbol in compilation.types + compilation.unnamed_types:
            for attribute in symbol.attributes:
                marker = _marker_kind(attribute, markers)
                if marker is None:
                    continue
                targets.append(
                    GenerationTarget(
                        marker=marker,
                        declaration=f"{symbol.kind.value} {symbol.display_name or '<unnamed>'}",
                        symbol=symbol,
                        location=attribute.location or symbol.location,
                        policy_argument=attribute.arguments[0] if attribute.arguments else None,
                    )
                )
                break

        logger.info(f"Discovered {len(targets)} null object targets")
        return targets

    # =========================================================================
    # Generated Support Code
    # =========================================================================

    def attribute_source(self, markers: MarkerConfig) -> str:
        """Source of the marker attributes and the NullObjLog flag enum."""
        return ATTRIBUTE_TEMPLATE.format(
            namespace=markers.namespace,
            class_attribute=markers.class_attribute,
            interface_attribute=markers.interface_attribute,
            policy_enum=markers.policy_enum,
        )


def _marker_kind(attribute: AttributeData, markers: MarkerConfig) -> MarkerKind | None:
    name = attribute.name.split("::")[-1]
    if "." in name:
        qualifier = name.rsplit(".", 1)[0]
        if qualifier != markers.namespace:
            return None
    if attribute.simple_name == markers.class_attribute:
        return MarkerKind.CLASS
    if attribute.simple_name == markers.interface_attribute:
        return MarkerKind.INTERFACE
    return None


class _UnitWalker:
    """Walks one compilation unit and registers what it declares."""

    def __init__(self, compilation: Compilation, unit: CompilationUnit):
        self.compilation = compilation
        self.unit = unit

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _text(node: Any) -> str | None:
        if node is None or node.is_missing:
            return None
        text = node.text.decode("utf-8").strip()
        return text or None

    def _location(self, node: Any) -> SourceLocation:
        row, column = node.start_point[0], node.start_point[1]
        return SourceLocation(path=self.unit.path, line=row + 1, column=column + 1)

    def _modifiers(self, node: Any) -> list[str]:
        return [
            text
            for child in node.children
            if child.type == "modifier" and (text := self._text(child))
        ]

    def _first_child(self, node: Any, *types: str) -> Any:
        for child in node.children:
            if child.type in types:
                return child
        return None

    # -------------------------------------------------------------------------
    # Namespaces and usings
    # -------------------------------------------------------------------------

    def walk(self, node: Any, namespace: str | None = None) -> None:
        current = namespace
        for child in node.named_children:
            if child.type == "using_directive":
                self._add_using(child)
            elif child.type == "namespace_declaration":
                inner = _join(namespace, self._text(child.child_by_field_name("name")))
                self.unit.namespaces.append(inner)
                body = child.child_by_field_name("body") or self._first_child(
                    child, "declaration_list"
                )
                if body is not None:
                    self.walk(body, inner)
            elif child.type == "file_scoped_namespace_declaration":
                current = _join(namespace, self._text(child.child_by_field_name("name")))
                self.unit.namespaces.append(current)
                # Some grammar versions nest the following members inside this node
                self.walk(child, current)
            elif child.type in _TYPE_DECLARATIONS:
                self._add_type(child, current, [])
            elif child.type == "declaration_list":
                self.walk(child, current)

    def _add_using(self, node: Any) -> None:
        match = _USING.match(self._text(node) or "")
        if not match:
            return
        body = _squash(match.group(1))
        if body and body not in self.unit.usings:
            self.unit.usings.append(body)

    # -------------------------------------------------------------------------
    # Type declarations
    # -------------------------------------------------------------------------

    def _add_type(self, node: Any, namespace: str | None, containing: list[str]) -> None:
        kind = _TYPE_DECLARATIONS[node.type]
        if node.type == "record_declaration" and self._first_child(node, "struct"):
            kind = TypeKind.STRUCT

        modifiers = self._modifiers(node)
        default_access = Accessibility.PRIVATE if containing else Accessibility.INTERNAL
        type_parameters = self._first_child(node, "type_parameter_list")

        symbol = NamedTypeSymbol(
            name=self._text(node.child_by_field_name("name")),
            namespace=namespace,
            containing_types=list(containing),
            kind=kind,
            accessibility=Accessibility.from_modifiers(modifiers, default_access),
            modifiers=modifiers,
            type_parameters=_squash(self._text(type_parameters) or "") or None,
            constraints=[
                _squash(self._text(c) or "")
                for c in node.children
                if c.type == "type_parameter_constraints_clause"
            ],
            base_types=self._base_types(node),
            attributes=self._attributes(node),
            locations=[self._location(node)],
        )

        body = node.child_by_field_name("body") or self._first_child(node, "declaration_list")
        nested: list[Any] = []
        if body is not None:
            for member in body.named_children:
                if member.type in _TYPE_DECLARATIONS:
                    nested.append(member)
                elif kind == TypeKind.INTERFACE:
                    self._add_member(symbol, member)

        if symbol.name is None:
            logger.warning(f"{symbol.locations[0]}: {kind.value} declaration without a name")
            self.compilation.add_unnamed(symbol)
            return

        self.compilation.add_type(symbol)
        for member in nested:
            self._add_type(member, namespace, containing + [symbol.name])

    def _base_types(self, node: Any) -> list[str]:
        base_list = self._first_child(node, "base_list")
        if base_list is None:
            return []
        bases = []
        for child in base_list.named_children:
            if child.type == "argument_list":
                continue
            if child.type == "primary_constructor_base_type":
                child = child.child_by_field_name("type") or child.named_children[0]
            text = self._text(child)
            if text:
                bases.append(_squash(text))
        return bases

    def _attributes(self, node: Any) -> list[AttributeData]:
        attributes = []
        for attribute_list in node.children:
            if attribute_list.type != "attribute_list":
                continue
            for attribute in attribute_list.named_children:
                if attribute.type != "attribute":
                    continue
                name_node = attribute.child_by_field_name("name") or (
                    attribute.named_children[0] if attribute.named_children else None
                )
                name = self._text(name_node)
                if not name:
                    continue
                arguments = []
                argument_list = self._first_child(attribute, "attribute_argument_list")
                if argument_list is not None:
                    arguments = [
                        _squash(self._text(arg) or "")
                        for arg in argument_list.named_children
                        if arg.type == "attribute_argument"
                    ]
                attributes.append(
                    AttributeData(
                        name=_squash(name),
                        arguments=arguments,
                        location=self._location(attribute_list),
                    )
                )
        return attributes

    # -------------------------------------------------------------------------
    # Interface members
    # -------------------------------------------------------------------------

    def _add_member(self, symbol: NamedTypeSymbol, node: Any) -> None:
        if node.type == "property_declaration":
            member = self._property(node)
        elif node.type == "method_declaration":
            member = self._method(node)
        elif node.type in _UNSUPPORTED_MEMBERS:
            logger.debug(
                f"{self._location(node)}: {_UNSUPPORTED_MEMBERS[node.type]} member on {symbol.name}"
            )
            symbol.unsupported_members.append(_squash(self._text(node) or node.type))
            return
        else:
            return

        if member is not None:
            symbol.members.append(member)

    def _property(self, node: Any) -> PropertySymbol | None:
        if self._first_child(node, "explicit_interface_specifier") is not None:
            return None
        modifiers = self._modifiers(node)
        has_getter = has_setter = False
        setter_keyword = "set"

        accessors = node.child_by_field_name("accessors") or self._first_child(node, "accessor_list")
        if accessors is not None:
            for accessor in accessors.named_children:
                if accessor.type != "accessor_declaration":
                    continue
                if "private" in self._modifiers(accessor):
                    continue
                keyword = self._accessor_keyword(accessor)
                if keyword == "get":
                    has_getter = True
                elif keyword in ("set", "init"):
                    has_setter = True
                    setter_keyword = keyword
        else:
            # Expression-bodied property: getter only
            has_getter = True

        return PropertySymbol(
            name=self._text(node.child_by_field_name("name")),
            type=_squash(self._text(node.child_by_field_name("type")) or ""),
            accessibility=Accessibility.from_modifiers(modifiers, Accessibility.PUBLIC),
            has_getter=has_getter,
            has_setter=has_setter,
            setter_keyword=setter_keyword,
            is_static="static" in modifiers,
            is_abstract="abstract" in modifiers,
            location=self._location(node),
        )

    def _accessor_keyword(self, accessor: Any) -> str | None:
        name = accessor.child_by_field_name("name")
        if name is not None:
            return self._text(name)
        for child in accessor.children:
            if child.type in ("get", "set", "init"):
                return child.type
        return None

    def _method(self, node: Any) -> MethodSymbol | None:
        if self._first_child(node, "explicit_interface_specifier") is not None:
            return None
        modifiers = self._modifiers(node)
        return_type = node.child_by_field_name("returns") or node.child_by_field_name("type")
        type_parameters = node.child_by_field_name("type_parameters") or self._first_child(
            node, "type_parameter_list"
        )
        parameter_list = node.child_by_field_name("parameters") or self._first_child(
            node, "parameter_list"
        )

        parameters = []
        if parameter_list is not None:
            for parameter in parameter_list.named_children:
                if parameter.type in ("parameter", "parameter_array"):
                    parameters.append(self._parameter(parameter))

        return MethodSymbol(
            name=self._text(node.child_by_field_name("name")),
            return_type=_squash(self._text(return_type) or "void"),
            parameters=parameters,
            accessibility=Accessibility.from_modifiers(modifiers, Accessibility.PUBLIC),
            type_parameters=_squash(self._text(type_parameters) or "") or None,
            constraints=[
                _squash(self._text(c) or "")
                for c in node.children
                if c.type == "type_parameter_constraints_clause"
            ],
            is_static="static" in modifiers,
            is_abstract="abstract" in modifiers,
            location=self._location(node),
        )

    def _parameter(self, node: Any) -> ParameterSymbol:
        skipped = ("attribute_list", "modifier", "parameter_modifier", "equals_value_clause")
        named = [c for c in node.named_children if c.type not in skipped]
        type_node = node.child_by_field_name("type")
        name_node = node.child_by_field_name("name")
        if name_node is None and named and named[-1].type == "identifier":
            name_node = named[-1]
        if type_node is None and len(named) >= 2:
            type_node = named[-2]

        words: list[str] = []
        for child in node.children:
            if type_node is not None and child.start_byte >= type_node.start_byte:
                break
            if child.type == "attribute_list":
                continue
            words.extend((self._text(child) or "").split())

        mode = ParameterMode.VALUE
        if "out" in words:
            mode = ParameterMode.OUT
        elif "in" in words or ("ref" in words and "readonly" in words):
            mode = ParameterMode.IN
        elif "ref" in words:
            mode = ParameterMode.REF

        return ParameterSymbol(
            type=_squash(self._text(type_node) or ""),
            name=self._text(name_node),
            mode=mode,
            is_params="params" in words,
        )


ATTRIBUTE_TEMPLATE = """\
// <auto-generated />
using System;

namespace {namespace}
{{
    [AttributeUsage(AttributeTargets.Class, Inherited = false, AllowMultiple = false)]
    sealed class {class_attribute}Attribute : Attribute
    {{
        public {policy_enum} LogType {{ get; }}

        public {class_attribute}Attribute({policy_enum} logType = {policy_enum}.None)
        {{
            LogType = logType;
        }}
    }}

    [AttributeUsage(AttributeTargets.Interface, Inherited = false, AllowMultiple = false)]
    sealed class {interface_attribute}Attribute : Attribute
    {{
        public {policy_enum} LogType {{ get; }}

        public {interface_attribute}Attribute({policy_enum} logType = {policy_enum}.None)
        {{
            LogType = logType;
        }}
    }}

    [Flags]
    internal enum {policy_enum}
    {{
        None = 0,
        DebugLog = 1,
        DebugLogErr = 1 << 1,
        DebugLogWarn = 1 << 2,
        ThrowException = 1 << 3,
    }}
}}
"""
