"""
Host symbol models.

The declarations a language front end hands to the generator: type symbols with their
members, attributes and base type references, plus the compilation units that carry
using directives. Everything here is plain data; resolution lives in the compilation.
"""

import re
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class Accessibility(str, Enum):
    """Declared accessibility of a type or member."""

    PUBLIC = "public"
    INTERNAL = "internal"
    PROTECTED = "protected"
    PRIVATE = "private"
    PROTECTED_INTERNAL = "protected internal"
    PRIVATE_PROTECTED = "private protected"
    NOT_APPLICABLE = "not applicable"

    @property
    def keyword(self) -> str:
        """Source keyword(s) for this accessibility, empty when none applies."""
        if self is Accessibility.NOT_APPLICABLE:
            return ""
        return self.value

    @property
    def is_namespace_legal(self) -> bool:
        """Whether a top-level type may be declared with this accessibility."""
        return self in (Accessibility.PUBLIC, Accessibility.INTERNAL)

    @classmethod
    def from_modifiers(cls, modifiers: list[str], default: "Accessibility") -> "Accessibility":
        """Pick the accessibility spelled by a modifier list."""
        present = set(modifiers)
        if {"protected", "internal"} <= present:
            return cls.PROTECTED_INTERNAL
        if {"private", "protected"} <= present:
            return cls.PRIVATE_PROTECTED
        for keyword in ("public", "internal", "protected", "private"):
            if keyword in present:
                return cls(keyword)
        return default


class TypeKind(str, Enum):
    """Kind of a named type declaration."""

    CLASS = "class"
    INTERFACE = "interface"
    STRUCT = "struct"
    RECORD = "record"


class ParameterMode(str, Enum):
    """How an argument is passed."""

    VALUE = "value"
    REF = "ref"
    OUT = "out"
    IN = "in"

    @property
    def keyword(self) -> str:
        return "" if self is ParameterMode.VALUE else self.value


class MethodKind(str, Enum):
    """Distinguishes ordinary methods from accessors synthesized for properties."""

    ORDINARY = "ordinary"
    PROPERTY_GET = "property_get"
    PROPERTY_SET = "property_set"

    @property
    def is_property_accessor(self) -> bool:
        return self in (MethodKind.PROPERTY_GET, MethodKind.PROPERTY_SET)


class SourceLocation(BaseModel):
    """A position in a source file (1-based line and column)."""

    path: Path | None = None
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.path or '<source>'}({self.line},{self.column})"


class CompilationUnit(BaseModel):
    """One parsed source file."""

    path: Path
    usings: list[str] = Field(
        default_factory=list,
        description="Using directive bodies as written, e.g. 'System' or 'static System.Math'",
    )
    namespaces: list[str] = Field(default_factory=list)


class AttributeData(BaseModel):
    """An attribute applied to a declaration."""

    name: str = Field(description="Attribute name as written, e.g. 'NullObjectGenerator.InheritsToNullObj'")
    arguments: list[str] = Field(default_factory=list, description="Argument texts as written")
    location: SourceLocation | None = None

    @property
    def simple_name(self) -> str:
        """Name without namespace qualifier or 'Attribute' suffix."""
        name = self.name.split("::")[-1].split(".")[-1]
        if name.endswith("Attribute") and name != "Attribute":
            name = name[: -len("Attribute")]
        return name


class ParameterSymbol(BaseModel):
    type: str
    name: str | None = None
    mode: ParameterMode = ParameterMode.VALUE
    is_params: bool = False


class PropertySymbol(BaseModel):
    member_kind: Literal["property"] = "property"
    name: str | None
    type: str
    accessibility: Accessibility = Accessibility.PUBLIC
    has_getter: bool = False
    has_setter: bool = False
    setter_keyword: Literal["set", "init"] = "set"
    is_static: bool = False
    is_abstract: bool = False
    location: SourceLocation | None = None


class MethodSymbol(BaseModel):
    member_kind: Literal["method"] = "method"
    name: str | None
    return_type: str
    parameters: list[ParameterSymbol] = Field(default_factory=list)
    accessibility: Accessibility = Accessibility.PUBLIC
    method_kind: MethodKind = MethodKind.ORDINARY
    type_parameters: str | None = Field(default=None, description="e.g. '<T>'")
    constraints: list[str] = Field(default_factory=list, description="'where' clauses as written")
    is_static: bool = False
    is_abstract: bool = False
    location: SourceLocation | None = None

    @property
    def is_property_accessor(self) -> bool:
        return self.method_kind.is_property_accessor


MemberSymbol = Annotated[Union[PropertySymbol, MethodSymbol], Field(discriminator="member_kind")]


class NamedTypeSymbol(BaseModel):
    """A class, interface, struct or record declaration (partial parts merged)."""

    name: str | None
    namespace: str | None = Field(default=None, description="None for the global namespace")
    containing_types: list[str] = Field(default_factory=list)
    kind: TypeKind
    accessibility: Accessibility = Accessibility.INTERNAL
    modifiers: list[str] = Field(default_factory=list)
    type_parameters: str | None = None
    constraints: list[str] = Field(default_factory=list)
    base_types: list[str] = Field(default_factory=list, description="Base list entries as written")
    members: list[MemberSymbol] = Field(default_factory=list)
    unsupported_members: list[str] = Field(
        default_factory=list,
        description="Declarations with no stub shape (indexers, events), as written",
    )
    attributes: list[AttributeData] = Field(default_factory=list)
    locations: list[SourceLocation] = Field(default_factory=list)

    @property
    def arity(self) -> int:
        """Number of type parameters."""
        return len(self.type_parameter_names)

    @property
    def type_parameter_names(self) -> list[str]:
        """Declared type parameter names with variance and attributes removed."""
        return declared_type_parameter_names(self.type_parameters)

    @property
    def type_argument_list(self) -> str:
        """'<T, U>' for a generic type, empty otherwise. Legal on a class and in a base list."""
        names = self.type_parameter_names
        return f"<{', '.join(names)}>" if names else ""

    @property
    def metadata_name(self) -> str:
        """Name plus generic arity, e.g. 'IRepository`1'."""
        name = self.name or ""
        return f"{name}`{self.arity}" if self.arity else name

    @property
    def qualified_name(self) -> str:
        """Dotted name without type arguments, e.g. 'SandBox.Outer.IHoge'."""
        parts = [self.namespace] if self.namespace else []
        parts.extend(self.containing_types)
        parts.append(self.name or "")
        return ".".join(parts)

    @property
    def display_name(self) -> str:
        """Qualified name with the type parameter names, e.g. 'Game.IProvider<T>'."""
        return f"{self.qualified_name}{self.type_argument_list}"

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def location(self) -> SourceLocation | None:
        return self.locations[0] if self.locations else None


class MarkerKind(str, Enum):
    """Which annotation promoted a declaration."""

    CLASS = "class"
    INTERFACE = "interface"


class GenerationTarget(BaseModel):
    """One annotated declaration found by discovery."""

    marker: MarkerKind
    declaration: str = Field(description="Short text identifying the declaration")
    symbol: NamedTypeSymbol | None = None
    location: SourceLocation | None = None
    policy_argument: str | None = Field(
        default=None, description="Side-effect policy argument as written, None when omitted"
    )


def split_type_arguments(text: str) -> list[str]:
    """Split '<A, B<C, D>>' into ['A', 'B<C, D>'] honouring nesting."""
    inner = text.strip()
    if inner.startswith("<") and inner.endswith(">"):
        inner = inner[1:-1]
    parts: list[str] = []
    depth = 0
    current = ""
    for char in inner:
        if char in "<([":
            depth += 1
        elif char in ">)]":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        parts.append(current.strip())
    return parts


def split_generic_name(reference: str) -> tuple[str, str]:
    """Split 'Ns.IRepo<int>' into ('Ns.IRepo', '<int>')."""
    reference = reference.strip()
    if reference.startswith("global::"):
        reference = reference[len("global::"):]
    index = reference.find("<")
    if index == -1:
        return reference, ""
    return reference[:index].strip(), reference[index:].strip()


_ATTRIBUTE_LIST = re.compile(r"\[[^\]]*\]")
_IDENTIFIER = re.compile(r"(?<![\w.@])@?[A-Za-z_]\w*")


def declared_type_parameter_names(text: str | None) -> list[str]:
    """Names from a type parameter list: '<[A] out T, in U>' gives ['T', 'U']."""
    if not text:
        return []
    names = []
    for part in split_type_arguments(text):
        words = _ATTRIBUTE_LIST.sub(" ", part).split()
        if words:
            names.append(words[-1])
    return names


def substitute_type_parameters(type_text: str, mapping: dict[str, str]) -> str:
    """
    Replace type parameter names in a type spelling.

    Only unqualified identifiers are replaced, so 'T[]' and 'List<T>' change while
    'Outer.T' is left alone.
    """
    if not mapping:
        return type_text
    return _IDENTIFIER.sub(lambda m: mapping.get(m.group(0), m.group(0)), type_text)
