"""
Member model extraction.

Turns an annotated declaration into a TypeMeta: the interface set it must conform to,
the deduplicated properties and methods of those interfaces, and the using directives
their signatures need.
"""

import logging

from nullobjgen.generator.diagnostics import (
    NotExtensibleError,
    RequiredNameMissingError,
    TargetUnresolvedError,
)
from nullobjgen.generator.meta import (
    MemberSignature,
    MethodDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeMeta,
)
from nullobjgen.generator.policy import SideEffectPolicy
from nullobjgen.symbols.compilation import Compilation, InterfaceReference
from nullobjgen.symbols.model import (
    Accessibility,
    GenerationTarget,
    MarkerKind,
    MethodSymbol,
    NamedTypeSymbol,
    PropertySymbol,
    TypeKind,
    declared_type_parameter_names,
)

logger = logging.getLogger(__name__)

_CLASS_KINDS = (TypeKind.CLASS, TypeKind.RECORD)


class MemberModelExtractor:
    """Builds TypeMeta objects from a compilation. Holds no per-target state."""

    def __init__(self, compilation: Compilation):
        self.compilation = compilation

    def extract(self, target: GenerationTarget, policy: SideEffectPolicy) -> TypeMeta:
        """
        Extract the member model for one target.

        Args:
            target: The annotated declaration
            policy: Side-effect policy declared on the annotation

        Returns:
            TypeMeta for the target

        Raises:
            TargetUnresolvedError: If the declaration has no symbol in the compilation
            RequiredNameMissingError: If the type, a member or a parameter has no name
            NotExtensibleError: If the type cannot be given a companion implementation
            ValueError: If a member has a shape that cannot be stubbed
        """
        symbol = self._resolve_target(target)
        self._check_eligible(target, symbol)

        interfaces = self.interface_set(symbol)
        properties, methods = self.collect_members(interfaces)
        imports = self.collect_imports(interfaces)
        imports.discard(symbol.namespace or "")

        accessibility = symbol.accessibility
        if not accessibility.is_namespace_legal:
            logger.debug(
                f"{symbol.display_name} is {accessibility.keyword}; "
                f"its stand-in is declared internal at namespace scope"
            )
            accessibility = Accessibility.INTERNAL

        meta = TypeMeta(
            qualified_name=symbol.qualified_name,
            name=symbol.name,
            namespace=symbol.namespace,
            accessibility=accessibility,
            kind=symbol.kind,
            policy=policy,
            interfaces=tuple(ref.display_name for ref in interfaces),
            properties=tuple(properties),
            methods=tuple(methods),
            imports=frozenset(imports),
            type_parameters=symbol.type_argument_list or None,
            constraints=tuple(symbol.constraints),
        )
        logger.debug(
            f"Extracted {meta.qualified_name}: {len(meta.interfaces)} interfaces, "
            f"{len(properties)} properties, {len(methods)} methods"
        )
        return meta

    # =========================================================================
    # Target Checks
    # =========================================================================

    def _resolve_target(self, target: GenerationTarget) -> NamedTypeSymbol:
        symbol = target.symbol
        if symbol is None:
            raise TargetUnresolvedError(target.declaration, location=target.location)
        if not symbol.name:
            raise RequiredNameMissingError(
                target.declaration, "type name", location=target.location
            )
        if self.compilation.get_type(symbol.qualified_name, symbol.arity) is None:
            raise TargetUnresolvedError(symbol.display_name, location=target.location)
        return symbol

    def _check_eligible(self, target: GenerationTarget, symbol: NamedTypeSymbol) -> None:
        location = target.location or symbol.location
        if target.marker == MarkerKind.CLASS and symbol.kind not in _CLASS_KINDS:
            raise NotExtensibleError(
                symbol.display_name, f"a class marker cannot be applied to a {symbol.kind.value}",
                location=location,
            )
        if target.marker == MarkerKind.INTERFACE and symbol.kind != TypeKind.INTERFACE:
            raise NotExtensibleError(
                symbol.display_name, f"an interface marker cannot be applied to a {symbol.kind.value}",
                location=location,
            )
        if symbol.is_static:
            raise NotExtensibleError(
                symbol.display_name, "static types cannot implement interfaces",
                location=location,
            )

    # =========================================================================
    # Interface Set
    # =========================================================================

    def interface_set(self, symbol: NamedTypeSymbol) -> list[InterfaceReference]:
        """
        Interfaces the stand-in declares conformance to.

        A class conforms to its full transitive interface set; an interface conforms to
        itself followed by everything it extends.
        """
        closure = self.compilation.all_interfaces(symbol)
        if symbol.kind != TypeKind.INTERFACE:
            return closure

        own = InterfaceReference(symbol=symbol, display_name=symbol.display_name)
        return [own] + [ref for ref in closure if ref.key != own.key]

    # =========================================================================
    # Members
    # =========================================================================

    def collect_members(
        self, interfaces: list[InterfaceReference]
    ) -> tuple[list[PropertyDescriptor], list[MethodDescriptor]]:
        """
        Flatten and deduplicate the members of an interface set.

        Properties and methods are deduplicated independently; the first occurrence in
        interface order wins. Member types are spelled through the constructed reference,
        so IRepo<int>.Get() returns int.

        Raises:
            ValueError: If an interface declares a member no stub can implement
        """
        properties: dict[MemberSignature, PropertyDescriptor] = {}
        methods: dict[MemberSignature, MethodDescriptor] = {}

        for ref in interfaces:
            if ref.symbol.unsupported_members:
                raise ValueError(
                    f"{ref.display_name} declares members that cannot be stubbed: "
                    + "; ".join(ref.symbol.unsupported_members)
                )
            for member in ref.symbol.members:
                if member.is_static and member.is_abstract:
                    raise ValueError(
                        f"{ref.display_name}.{member.name} is static abstract and cannot be stubbed"
                    )
                if member.is_static or member.accessibility == Accessibility.PRIVATE:
                    continue
                if isinstance(member, PropertySymbol):
                    descriptor = self._property_descriptor(member, ref)
                    bucket = properties
                elif isinstance(member, MethodSymbol):
                    if member.is_property_accessor:
                        continue
                    descriptor = self._method_descriptor(member, ref)
                    bucket = methods
                else:
                    raise ValueError(f"Unexpected member {member!r} in {ref.display_name}")

                if descriptor.signature in bucket:
                    logger.debug(
                        f"Dropping {descriptor.signature.name} from {ref.display_name}: "
                        f"already declared by {bucket[descriptor.signature].declaring_interface}"
                    )
                    continue
                bucket[descriptor.signature] = descriptor

        return list(properties.values()), list(methods.values())

    def _property_descriptor(
        self, member: PropertySymbol, ref: InterfaceReference
    ) -> PropertyDescriptor:
        if not member.name:
            raise RequiredNameMissingError(
                ref.display_name, "property name", location=member.location
            )
        if not member.has_getter and not member.has_setter:
            raise ValueError(f"Property {ref.display_name}.{member.name} declares no accessors")
        return PropertyDescriptor(
            name=member.name,
            type=ref.substitute(member.type),
            accessibility=member.accessibility,
            has_getter=member.has_getter,
            has_setter=member.has_setter,
            setter_keyword=member.setter_keyword,
            declaring_interface=ref.display_name,
        )

    def _method_descriptor(self, member: MethodSymbol, ref: InterfaceReference) -> MethodDescriptor:
        if not member.name:
            raise RequiredNameMissingError(
                ref.display_name, "method name", location=member.location
            )
        # A method's own type parameters hide same-named ones of the interface
        own = declared_type_parameter_names(member.type_parameters)
        parameters = []
        for index, parameter in enumerate(member.parameters):
            if not parameter.name:
                raise RequiredNameMissingError(
                    f"{ref.display_name}.{member.name}",
                    f"parameter {index + 1} has no name",
                    location=member.location,
                )
            parameters.append(
                ParameterDescriptor(
                    type=ref.substitute(parameter.type, own),
                    name=parameter.name,
                    mode=parameter.mode,
                    is_params=parameter.is_params,
                )
            )
        return MethodDescriptor(
            name=member.name,
            return_type=ref.substitute(member.return_type, own),
            accessibility=member.accessibility,
            parameters=tuple(parameters),
            type_parameters=member.type_parameters,
            constraints=tuple(ref.substitute(c, own) for c in member.constraints),
            declaring_interface=ref.display_name,
        )

    # =========================================================================
    # Imports
    # =========================================================================

    def collect_imports(self, interfaces: list[InterfaceReference]) -> set[str]:
        """Union of the using directives of every unit declaring an interface in the set."""
        imports: set[str] = set()
        for ref in interfaces:
            for location in ref.symbol.locations:
                imports.update(self.compilation.usings_for(location))
            if ref.symbol.namespace:
                imports.add(ref.symbol.namespace)
        return imports
