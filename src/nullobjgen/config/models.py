"""
Core configuration models for NullObjGen.

Defines all configuration structures using Pydantic for validation.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class LanguageType(str, Enum):
    """Supported source languages."""

    CSHARP = "csharp"


# ============================================================================
# Source Configuration
# ============================================================================


class SourceConfig(BaseModel):
    """Where annotated declarations are discovered."""

    language: LanguageType = Field(default=LanguageType.CSHARP)
    root: Path = Field(default=Path("."), description="Source code root directory")
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["/bin/", "/obj/", ".g.cs", ".git"],
        description="Path fragments to exclude from discovery",
    )


# ============================================================================
# Output Configuration
# ============================================================================


class OutputConfig(BaseModel):
    """Configuration for generated files."""

    directory: Path = Field(default=Path("./Generated"), description="Output directory")
    file_extension: str = Field(default="cs", description="Extension of generated files")
    emit_attribute_source: bool = Field(
        default=True, description="Emit the marker attribute definitions with every run"
    )
    indent_size: int = Field(default=4, ge=0, le=16, description="Spaces per indent level")
    jobs: int = Field(default=1, ge=1, description="Targets synthesized in parallel")

    @field_validator("file_extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        value = value.strip().lstrip(".")
        if not value:
            raise ValueError("file_extension must not be empty")
        return value


# ============================================================================
# Marker Configuration
# ============================================================================


class MarkerConfig(BaseModel):
    """Names of the annotations that promote declarations to null objects."""

    class_attribute: str = Field(default="InheritsToNullObj")
    interface_attribute: str = Field(default="InterfaceToNullObj")
    namespace: str = Field(default="NullObjectGenerator")
    policy_enum: str = Field(default="NullObjLog")


# ============================================================================
# Side Effect Configuration
# ============================================================================


class SideEffectConfig(BaseModel):
    """Statements emitted into stub bodies for each side-effect flag."""

    log_call: str = Field(default="UnityEngine.Debug.Log")
    log_error_call: str = Field(default="UnityEngine.Debug.LogError")
    log_warning_call: str = Field(default="UnityEngine.Debug.LogWarning")
    exception_type: str = Field(default="System.Exception")
    getter_message: str = Field(default="{stub}.{member} is null. return default value.")
    setter_message: str = Field(default="{stub}.{member} is null. do nothing.")
    method_message: str = Field(default="{stub}.{member} is null. do nothing.")


def _default_async_conventions() -> dict[str, str]:
    return {
        "UniTask": "UniTask.CompletedTask",
        "Task": "System.Threading.Tasks.Task.CompletedTask",
    }


class SynthesisConfig(BaseModel):
    """Everything the stub synthesizer reads."""

    side_effects: SideEffectConfig = Field(default_factory=SideEffectConfig)
    async_conventions: dict[str, str] = Field(
        default_factory=_default_async_conventions,
        description="Simple return type name -> already-completed value expression",
    )
    stub_suffix: str = Field(default="AsNullObj")
    header_comment: str = Field(default="This class is generated by NullObjectGenerator.")


# ============================================================================
# Main Configuration
# ============================================================================


class NullObjConfig(BaseModel):
    """Root configuration model for NullObjGen."""

    source: SourceConfig = Field(default_factory=SourceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    markers: MarkerConfig = Field(default_factory=MarkerConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)

    def generated_file_name(self, type_name: str) -> str:
        """File name registered for a target's stand-in."""
        return f"{type_name}{self.synthesis.stub_suffix}.g.{self.output.file_extension}"
