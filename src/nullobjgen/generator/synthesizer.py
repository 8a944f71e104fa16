"""
Stub synthesis.

Writes the C# text of a null object stand-in from a TypeMeta: imports, optional
namespace block, the type header, a parameterless constructor, then one block per
property and per method. Every block goes through CodeWriter.block_scope so each
opened brace is closed exactly once.
"""

import logging

from nullobjgen.config.models import SynthesisConfig
from nullobjgen.generator.code_writer import CodeWriter
from nullobjgen.generator.meta import MethodDescriptor, PropertyDescriptor, TypeMeta, normalize_type
from nullobjgen.generator.policy import SideEffectPolicy
from nullobjgen.symbols.model import split_generic_name

logger = logging.getLogger(__name__)


def verbatim_string(text: str) -> str:
    """C# verbatim string literal for text."""
    return '@"' + text.replace('"', '""') + '"'


class StubSynthesizer:
    """
    Produces the source text of one stand-in type at a time.

    The writer belongs to this synthesizer; it is cleared before every target so a
    synthesizer can be reused sequentially but must not be shared between threads.
    """

    def __init__(self, config: SynthesisConfig | None = None, writer: CodeWriter | None = None):
        self.config = config or SynthesisConfig()
        self.writer = writer or CodeWriter()

    def stub_name(self, meta: TypeMeta) -> str:
        return f"{meta.name}{self.config.stub_suffix}"

    def synthesize(self, meta: TypeMeta, policy: SideEffectPolicy | None = None) -> str:
        """
        Render the stand-in for meta.

        Args:
            meta: Extracted member model
            policy: Side-effect policy for every body; defaults to meta.policy

        Returns:
            Complete source text
        """
        policy = meta.policy if policy is None else policy
        writer = self.writer
        writer.clear()
        try:
            self._write_file(meta, policy)
            return str(writer)
        finally:
            writer.clear()

    def _write_file(self, meta: TypeMeta, policy: SideEffectPolicy) -> None:
        writer = self.writer
        writer.append_line("// <auto-generated />")
        for using in sorted(meta.imports):
            writer.append_line(f"using {using};")
        writer.append_line()

        if meta.is_global_namespace:
            self._write_type(meta, policy)
        else:
            with writer.block_scope(f"namespace {meta.namespace}"):
                self._write_type(meta, policy)

    def _write_type(self, meta: TypeMeta, policy: SideEffectPolicy) -> None:
        writer = self.writer
        stub = self.stub_name(meta)
        accessibility = meta.accessibility.keyword

        header = f"{accessibility} class {stub}{meta.type_parameters or ''}"
        if meta.interfaces:
            header += " : " + ", ".join(meta.interfaces)

        if self.config.header_comment:
            writer.append_line(f"// {self.config.header_comment}")
        writer.append_line(header)
        with writer.indent_scope():
            for clause in meta.constraints:
                writer.append_line(clause)

        with writer.block_scope():
            with writer.block_scope(f"{accessibility} {stub}()"):
                pass

            for prop in meta.properties:
                writer.append_line()
                self._write_property(stub, prop, policy)

            for method in meta.methods:
                writer.append_line()
                self._write_method(stub, method, policy)

    # =========================================================================
    # Members
    # =========================================================================

    def _write_property(self, stub: str, prop: PropertyDescriptor, policy: SideEffectPolicy) -> None:
        writer = self.writer
        messages = self.config.side_effects
        with writer.block_scope(f"{_member_prefix(prop.accessibility.keyword)}{prop.type} {prop.name}"):
            if prop.has_getter:
                with writer.block_scope("get"):
                    self._write_side_effects(
                        policy, messages.getter_message.format(stub=stub, member=prop.name)
                    )
                    writer.append_line("return default;")
            if prop.has_setter:
                with writer.block_scope(prop.setter_keyword):
                    self._write_side_effects(
                        policy, messages.setter_message.format(stub=stub, member=prop.name)
                    )

    def _write_method(self, stub: str, method: MethodDescriptor, policy: SideEffectPolicy) -> None:
        writer = self.writer
        parameters = ", ".join(p.render() for p in method.parameters)
        signature = (
            f"{_member_prefix(method.accessibility.keyword)}{method.return_type} "
            f"{method.name}{method.type_parameters or ''}({parameters})"
        )
        writer.append_line(signature)
        with writer.indent_scope():
            for clause in method.constraints:
                writer.append_line(clause)

        with writer.block_scope():
            for parameter in method.output_parameters:
                writer.append_line(f"{parameter.name} = default;")

            message = self.config.side_effects.method_message.format(stub=stub, member=method.name)
            self._write_side_effects(policy, message)

            completed = self.completed_value(method.return_type)
            if completed is not None:
                writer.append_line(f"return {completed};")
            elif not method.returns_void:
                writer.append_line("return default;")

    def completed_value(self, return_type: str) -> str | None:
        """
        Already-completed value for a fire-and-forget async return type.

        Only non-generic types listed in the async conventions match, by simple name.
        """
        name, type_args = split_generic_name(normalize_type(return_type))
        if type_args or name.endswith("?"):
            return None
        return self.config.async_conventions.get(name.split(".")[-1])

    def _write_side_effects(self, policy: SideEffectPolicy, message: str) -> None:
        effects = self.config.side_effects
        literal = verbatim_string(message)
        statements = {
            SideEffectPolicy.LOG: f"{effects.log_call}({literal});",
            SideEffectPolicy.LOG_ERROR: f"{effects.log_error_call}({literal});",
            SideEffectPolicy.LOG_WARNING: f"{effects.log_warning_call}({literal});",
            SideEffectPolicy.THROW: f"throw new {effects.exception_type}({literal});",
        }
        for action in policy.actions():
            self.writer.append_line(statements[action])


def _member_prefix(keyword: str) -> str:
    return f"{keyword} " if keyword else ""
