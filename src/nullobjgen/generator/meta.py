"""
Normalized member model consumed by the stub synthesizer.

Descriptors compare and hash by signature (kind, name, parameter types), so the same
member reached through two interfaces of a diamond collapses to one entry.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Union

from nullobjgen.generator.policy import SideEffectPolicy
from nullobjgen.symbols.model import Accessibility, ParameterMode, TypeKind


class MemberSignature(NamedTuple):
    kind: str
    name: str
    parameter_types: tuple[str, ...]


def normalize_type(type_name: str) -> str:
    """Whitespace-insensitive spelling of a type, used only for identity."""
    return "".join(type_name.split())


@dataclass(frozen=True)
class ParameterDescriptor:
    type: str
    name: str
    mode: ParameterMode = ParameterMode.VALUE
    is_params: bool = False

    @property
    def identity_type(self) -> str:
        # ref/out/in all compile to a by-reference slot; value vs by-reference overloads differ
        prefix = "&" if self.mode is not ParameterMode.VALUE else ""
        return prefix + normalize_type(self.type)

    def render(self) -> str:
        words = []
        if self.is_params:
            words.append("params")
        if self.mode.keyword:
            words.append(self.mode.keyword)
        words.extend([self.type, self.name])
        return " ".join(words)


@dataclass(frozen=True, eq=False)
class PropertyDescriptor:
    name: str
    type: str
    accessibility: Accessibility
    has_getter: bool
    has_setter: bool
    setter_keyword: str = "set"
    declaring_interface: str | None = None

    @property
    def signature(self) -> MemberSignature:
        return MemberSignature("property", self.name, ())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (PropertyDescriptor, MethodDescriptor)):
            return NotImplemented
        return self.signature == other.signature

    def __hash__(self) -> int:
        return hash(self.signature)


@dataclass(frozen=True, eq=False)
class MethodDescriptor:
    name: str
    return_type: str
    accessibility: Accessibility
    parameters: tuple[ParameterDescriptor, ...] = ()
    type_parameters: str | None = None
    constraints: tuple[str, ...] = ()
    declaring_interface: str | None = None

    @property
    def signature(self) -> MemberSignature:
        return MemberSignature(
            "method", self.name, tuple(p.identity_type for p in self.parameters)
        )

    @property
    def output_parameters(self) -> list[ParameterDescriptor]:
        return [p for p in self.parameters if p.mode is ParameterMode.OUT]

    @property
    def returns_void(self) -> bool:
        return normalize_type(self.return_type) in ("void", "System.Void", "global::System.Void")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (PropertyDescriptor, MethodDescriptor)):
            return NotImplemented
        return self.signature == other.signature

    def __hash__(self) -> int:
        return hash(self.signature)


MemberDescriptor = Union[PropertyDescriptor, MethodDescriptor]


@dataclass(frozen=True)
class TypeMeta:
    """
    Everything needed to synthesize one stand-in type.

    Built once per annotated declaration and read-only afterwards.
    """

    qualified_name: str
    name: str
    namespace: str | None
    accessibility: Accessibility
    kind: TypeKind
    policy: SideEffectPolicy
    interfaces: tuple[str, ...] = ()
    properties: tuple[PropertyDescriptor, ...] = ()
    methods: tuple[MethodDescriptor, ...] = ()
    imports: frozenset[str] = field(default_factory=frozenset)
    type_parameters: str | None = None
    constraints: tuple[str, ...] = ()

    @property
    def members(self) -> list[MemberDescriptor]:
        """Properties first, then methods, each in first-seen order."""
        return [*self.properties, *self.methods]

    @property
    def is_global_namespace(self) -> bool:
        return not self.namespace
