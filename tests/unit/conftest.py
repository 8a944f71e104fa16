"""
Shared fixtures: small compilations built directly from symbols, no parser involved.
"""

from pathlib import Path

import pytest

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

SANDBOX_FILE = Path("SandBox/Class1.cs")
SHAPES_FILE = Path("Shapes/Shapes.cs")


def _loc(path: Path, line: int = 1) -> SourceLocation:
    return SourceLocation(path=path, line=line, column=5)


@pytest.fixture
def sandbox_compilation() -> Compilation:
    """The sample project: Class1 implements IHoge, IFuga is annotated directly."""
    compilation = Compilation()
    compilation.add_unit(
        CompilationUnit(path=SANDBOX_FILE, usings=["System", "NullObjectGenerator"], namespaces=["SandBox"])
    )

    compilation.add_type(
        NamedTypeSymbol(
            name="Class1",
            namespace="SandBox",
            kind=TypeKind.CLASS,
            accessibility=Accessibility.PUBLIC,
            modifiers=["public"],
            base_types=["IHoge"],
            attributes=[AttributeData(name="InheritsToNullObj", arguments=[], location=_loc(SANDBOX_FILE, 6))],
            locations=[_loc(SANDBOX_FILE, 7)],
        )
    )
    compilation.add_type(
        NamedTypeSymbol(
            name="IHoge",
            namespace="SandBox",
            kind=TypeKind.INTERFACE,
            accessibility=Accessibility.PUBLIC,
            modifiers=["public"],
            members=[
                PropertySymbol(name="TestStr", type="string", has_getter=True),
                MethodSymbol(
                    name="Test",
                    return_type="void",
                    parameters=[
                        ParameterSymbol(type="int", name="tes"),
                        ParameterSymbol(type="float", name="tes2"),
                    ],
                ),
            ],
            locations=[_loc(SANDBOX_FILE, 20)],
        )
    )
    compilation.add_type(
        NamedTypeSymbol(
            name="IFuga",
            namespace="SandBox",
            kind=TypeKind.INTERFACE,
            accessibility=Accessibility.PUBLIC,
            modifiers=["public"],
            members=[
                PropertySymbol(name="Uin", type="uint", has_getter=True, has_setter=True),
                MethodSymbol(
                    name="GetTestStr",
                    return_type="string",
                    parameters=[ParameterSymbol(type="string", name="source")],
                ),
            ],
            attributes=[
                AttributeData(
                    name="InterfaceToNullObj",
                    arguments=["NullObjLog.ThrowException"],
                    location=_loc(SANDBOX_FILE, 27),
                )
            ],
            locations=[_loc(SANDBOX_FILE, 28)],
        )
    )
    return compilation


@pytest.fixture
def diamond_compilation() -> Compilation:
    """
    IShape <- IArea, IShape <- IPerimeter, Square : IArea, IPerimeter.

    IArea and IPerimeter both redeclare Scale(int) as well.
    """
    compilation = Compilation()
    compilation.add_unit(
        CompilationUnit(path=SHAPES_FILE, usings=["System.Threading.Tasks"], namespaces=["Shapes"])
    )

    scale = MethodSymbol(
        name="Scale", return_type="void", parameters=[ParameterSymbol(type="int", name="factor")]
    )
    compilation.add_type(
        NamedTypeSymbol(
            name="IShape",
            namespace="Shapes",
            kind=TypeKind.INTERFACE,
            accessibility=Accessibility.PUBLIC,
            members=[
                PropertySymbol(name="Name", type="string", has_getter=True),
                MethodSymbol(name="Draw", return_type="Task"),
            ],
            locations=[_loc(SHAPES_FILE, 3)],
        )
    )
    compilation.add_type(
        NamedTypeSymbol(
            name="IArea",
            namespace="Shapes",
            kind=TypeKind.INTERFACE,
            accessibility=Accessibility.PUBLIC,
            base_types=["IShape"],
            members=[
                MethodSymbol(name="Area", return_type="double"),
                scale,
                MethodSymbol(name="get_Name", return_type="string", method_kind="property_get"),
            ],
            locations=[_loc(SHAPES_FILE, 9)],
        )
    )
    compilation.add_type(
        NamedTypeSymbol(
            name="IPerimeter",
            namespace="Shapes",
            kind=TypeKind.INTERFACE,
            accessibility=Accessibility.PUBLIC,
            base_types=["IShape"],
            members=[
                MethodSymbol(name="Perimeter", return_type="double"),
                scale.model_copy(),
                MethodSymbol(
                    name="Scale",
                    return_type="void",
                    parameters=[ParameterSymbol(type="double", name="factor")],
                ),
                MethodSymbol(
                    name="TryMeasure",
                    return_type="bool",
                    parameters=[
                        ParameterSymbol(type="string", name="unit", mode=ParameterMode.IN),
                        ParameterSymbol(type="double", name="width", mode=ParameterMode.OUT),
                        ParameterSymbol(type="double", name="height", mode=ParameterMode.OUT),
                        ParameterSymbol(type="int", name="attempts", mode=ParameterMode.REF),
                    ],
                ),
            ],
            locations=[_loc(SHAPES_FILE, 15)],
        )
    )
    compilation.add_type(
        NamedTypeSymbol(
            name="Square",
            namespace="Shapes",
            kind=TypeKind.CLASS,
            accessibility=Accessibility.INTERNAL,
            base_types=["IArea", "IPerimeter"],
            attributes=[AttributeData(name="InheritsToNullObj", arguments=["NullObjLog.DebugLog | NullObjLog.ThrowException"])],
            locations=[_loc(SHAPES_FILE, 25)],
        )
    )
    return compilation


@pytest.fixture
def target_for():
    """Build a GenerationTarget for a symbol in a compilation."""

    def _target_for(compilation: Compilation, qualified_name: str, policy: str | None = None) -> GenerationTarget:
        symbol = compilation.get_type(qualified_name)
        marker = MarkerKind.INTERFACE if symbol.kind == TypeKind.INTERFACE else MarkerKind.CLASS
        return GenerationTarget(
            marker=marker,
            declaration=f"{symbol.kind.value} {symbol.display_name}",
            symbol=symbol,
            location=symbol.location,
            policy_argument=policy,
        )

    return _target_for
