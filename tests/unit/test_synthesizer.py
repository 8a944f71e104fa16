"""
Unit tests for stub synthesis.
"""

import pytest

from nullobjgen.config.models import SynthesisConfig
from nullobjgen.generator.code_writer import CodeWriter
from nullobjgen.generator.extractor import MemberModelExtractor
from nullobjgen.generator.meta import (
    MethodDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeMeta,
)
from nullobjgen.generator.policy import SideEffectPolicy
from nullobjgen.generator.synthesizer import StubSynthesizer, verbatim_string
from nullobjgen.symbols.model import Accessibility, ParameterMode, TypeKind

IFUGA_THROW = """\
// <auto-generated />
using NullObjectGenerator;
using System;

namespace SandBox
{
    // This class is generated by NullObjectGenerator.
    public class IFugaAsNullObj : SandBox.IFuga
    {
        public IFugaAsNullObj()
        {
        }

        public uint Uin
        {
            get
            {
                throw new System.Exception(@"IFugaAsNullObj.Uin is null. return default value.");
                return default;
            }
            set
            {
                throw new System.Exception(@"IFugaAsNullObj.Uin is null. do nothing.");
            }
        }

        public string GetTestStr(string source)
        {
            throw new System.Exception(@"IFugaAsNullObj.GetTestStr is null. do nothing.");
            return default;
        }
    }
}
"""

CLASS1_NONE = """\
// <auto-generated />
using NullObjectGenerator;
using System;

namespace SandBox
{
    // This class is generated by NullObjectGenerator.
    public class Class1AsNullObj : SandBox.IHoge
    {
        public Class1AsNullObj()
        {
        }

        public string TestStr
        {
            get
            {
                return default;
            }
        }

        public void Test(int tes, float tes2)
        {
        }
    }
}
"""


def _meta(**overrides) -> TypeMeta:
    values = dict(
        qualified_name="Game.IPlayer",
        name="IPlayer",
        namespace="Game",
        accessibility=Accessibility.PUBLIC,
        kind=TypeKind.INTERFACE,
        policy=SideEffectPolicy.NONE,
        interfaces=("Game.IPlayer",),
    )
    values.update(overrides)
    return TypeMeta(**values)


def _method(name: str, return_type: str, *parameters: ParameterDescriptor) -> MethodDescriptor:
    return MethodDescriptor(
        name=name, return_type=return_type, accessibility=Accessibility.PUBLIC, parameters=parameters
    )


@pytest.fixture
def synthesizer():
    return StubSynthesizer()


def test_interface_target_with_throw(sandbox_compilation, target_for, synthesizer):
    """An annotated interface with ThrowException produces throwing bodies."""
    meta = MemberModelExtractor(sandbox_compilation).extract(
        target_for(sandbox_compilation, "SandBox.IFuga"), SideEffectPolicy.THROW
    )

    assert synthesizer.synthesize(meta) == IFUGA_THROW


def test_class_target_without_policy(sandbox_compilation, target_for, synthesizer):
    """A class with no side effects gets empty void bodies and default getters."""
    meta = MemberModelExtractor(sandbox_compilation).extract(
        target_for(sandbox_compilation, "SandBox.Class1"), SideEffectPolicy.NONE
    )

    assert synthesizer.synthesize(meta) == CLASS1_NONE


def test_explicit_policy_overrides_meta(sandbox_compilation, target_for, synthesizer):
    meta = MemberModelExtractor(sandbox_compilation).extract(
        target_for(sandbox_compilation, "SandBox.IFuga"), SideEffectPolicy.NONE
    )

    text = synthesizer.synthesize(meta, SideEffectPolicy.THROW)

    assert text == IFUGA_THROW


def test_synthesis_is_deterministic(sandbox_compilation, target_for, synthesizer):
    meta = MemberModelExtractor(sandbox_compilation).extract(
        target_for(sandbox_compilation, "SandBox.IFuga"), SideEffectPolicy.THROW
    )

    first = synthesizer.synthesize(meta)
    second = synthesizer.synthesize(meta)

    assert first == second
    assert synthesizer.writer.indent_level == 0
    assert str(synthesizer.writer) == ""


def test_side_effects_follow_emission_order(synthesizer):
    meta = _meta(methods=(_method("Jump", "void"),))
    policy = SideEffectPolicy.THROW | SideEffectPolicy.LOG_WARNING | SideEffectPolicy.LOG

    lines = [line.strip() for line in synthesizer.synthesize(meta, policy).splitlines()]

    start = lines.index("public void Jump()")
    assert lines[start + 2 : start + 5] == [
        'UnityEngine.Debug.Log(@"IPlayerAsNullObj.Jump is null. do nothing.");',
        'UnityEngine.Debug.LogWarning(@"IPlayerAsNullObj.Jump is null. do nothing.");',
        'throw new System.Exception(@"IPlayerAsNullObj.Jump is null. do nothing.");',
    ]


def test_log_error_uses_error_call(synthesizer):
    meta = _meta(methods=(_method("Jump", "void"),))

    text = synthesizer.synthesize(meta, SideEffectPolicy.LOG_ERROR)

    assert 'UnityEngine.Debug.LogError(@"IPlayerAsNullObj.Jump is null. do nothing.");' in text


@pytest.mark.parametrize(
    "policy",
    [
        SideEffectPolicy.NONE,
        SideEffectPolicy.LOG,
        SideEffectPolicy.LOG_ERROR,
        SideEffectPolicy.LOG_WARNING,
        SideEffectPolicy.THROW,
        SideEffectPolicy.LOG | SideEffectPolicy.THROW,
        SideEffectPolicy.LOG | SideEffectPolicy.LOG_ERROR | SideEffectPolicy.LOG_WARNING | SideEffectPolicy.THROW,
    ],
)
def test_out_parameters_are_assigned_first(synthesizer, policy):
    method = _method(
        "TryGet",
        "bool",
        ParameterDescriptor(type="string", name="key", mode=ParameterMode.IN),
        ParameterDescriptor(type="int", name="value", mode=ParameterMode.OUT),
        ParameterDescriptor(type="float", name="weight", mode=ParameterMode.OUT),
        ParameterDescriptor(type="int", name="count", mode=ParameterMode.REF),
    )
    meta = _meta(methods=(method,))

    lines = [line.strip() for line in synthesizer.synthesize(meta, policy).splitlines()]

    start = lines.index("public bool TryGet(in string key, out int value, out float weight, ref int count)")
    effects = len(policy.actions())
    body = lines[start + 1 : start + 6 + effects]
    assert body[:3] == ["{", "value = default;", "weight = default;"]
    assert len(body[3:-2]) == effects
    assert all("IPlayerAsNullObj.TryGet is null. do nothing." in line for line in body[3:-2])
    assert body[-2:] == ["return default;", "}"]


def test_params_array_is_rendered(synthesizer):
    method = _method("Say", "void", ParameterDescriptor(type="object[]", name="args", is_params=True))

    text = synthesizer.synthesize(_meta(methods=(method,)))

    assert "public void Say(params object[] args)" in text


@pytest.mark.parametrize(
    "return_type, expected",
    [
        ("UniTask", "return UniTask.CompletedTask;"),
        ("Cysharp.Threading.Tasks.UniTask", "return UniTask.CompletedTask;"),
        ("Task", "return System.Threading.Tasks.Task.CompletedTask;"),
        ("System.Threading.Tasks.Task", "return System.Threading.Tasks.Task.CompletedTask;"),
        ("Task<int>", "return default;"),
        ("UniTask<string>", "return default;"),
        ("int", "return default;"),
    ],
)
def test_async_returns(synthesizer, return_type, expected):
    meta = _meta(methods=(_method("Load", return_type),))

    text = synthesizer.synthesize(meta)

    assert expected in text


def test_completed_value_ignores_nullable(synthesizer):
    assert synthesizer.completed_value("Task?") is None
    assert synthesizer.completed_value("Task") == "System.Threading.Tasks.Task.CompletedTask"


def test_void_method_has_no_return(synthesizer):
    text = synthesizer.synthesize(_meta(methods=(_method("Reset", "void"),)))

    assert "return" not in text


def test_getter_only_and_init_properties(synthesizer):
    properties = (
        PropertyDescriptor(
            name="Id", type="int", accessibility=Accessibility.PUBLIC, has_getter=True, has_setter=False
        ),
        PropertyDescriptor(
            name="Tag",
            type="string",
            accessibility=Accessibility.PUBLIC,
            has_getter=False,
            has_setter=True,
            setter_keyword="init",
        ),
    )

    lines = [line.strip() for line in synthesizer.synthesize(_meta(properties=properties)).splitlines()]

    id_start = lines.index("public int Id")
    assert lines[id_start + 1 : id_start + 7] == ["{", "get", "{", "return default;", "}", "}"]
    tag_start = lines.index("public string Tag")
    assert lines[tag_start + 1 : tag_start + 6] == ["{", "init", "{", "}", "}"]


def test_global_namespace_has_no_namespace_block(synthesizer):
    meta = _meta(qualified_name="IPlayer", namespace=None, interfaces=("IPlayer",))

    text = synthesizer.synthesize(meta)

    assert "namespace" not in text
    assert text.splitlines()[:4] == [
        "// <auto-generated />",
        "",
        "// This class is generated by NullObjectGenerator.",
        "public class IPlayerAsNullObj : IPlayer",
    ]


def test_internal_stub_and_generic_header(synthesizer):
    meta = _meta(
        qualified_name="Game.IRepository",
        name="IRepository",
        accessibility=Accessibility.INTERNAL,
        interfaces=("Game.IRepository<T>",),
        type_parameters="<T>",
        constraints=("where T : class",),
        methods=(_method("Find", "T", ParameterDescriptor(type="int", name="id")),),
    )

    lines = synthesizer.synthesize(meta).splitlines()

    header = lines.index("    internal class IRepositoryAsNullObj<T> : Game.IRepository<T>")
    assert lines[header + 1] == "        where T : class"
    assert lines[header + 2] == "    {"
    assert "        internal IRepositoryAsNullObj()" in lines
    assert "        public T Find(int id)" in lines


def test_braces_are_balanced(diamond_compilation, target_for, synthesizer):
    meta = MemberModelExtractor(diamond_compilation).extract(
        target_for(diamond_compilation, "Shapes.Square"), SideEffectPolicy.LOG | SideEffectPolicy.THROW
    )

    text = synthesizer.synthesize(meta)

    assert text.count("{") == text.count("}")
    assert "internal class SquareAsNullObj : Shapes.IArea, Shapes.IShape, Shapes.IPerimeter" in text
    assert text.count("public void Scale(int factor)") == 1
    assert text.count("public void Scale(double factor)") == 1
    assert "return System.Threading.Tasks.Task.CompletedTask;" in text


def test_custom_configuration():
    config = SynthesisConfig(
        stub_suffix="Null",
        header_comment="",
        async_conventions={"ValueTask": "default"},
    )
    config.side_effects.exception_type = "System.InvalidOperationException"
    synthesizer = StubSynthesizer(config, CodeWriter(indent_size=2))
    meta = _meta(methods=(_method("Load", "ValueTask"),))

    text = synthesizer.synthesize(meta, SideEffectPolicy.THROW)

    assert "// This class" not in text
    assert "  public class IPlayerNull : Game.IPlayer" in text
    assert '      throw new System.InvalidOperationException(@"IPlayerNull.Load is null. do nothing.");' in text
    assert "      return default;" in text


def test_verbatim_string_doubles_quotes():
    assert verbatim_string('say "hi"') == '@"say ""hi"""'
    assert verbatim_string(r"C:\temp") == '@"C:\\temp"'
