"""
Null object generation: member extraction, stub synthesis and the pipeline driving them.
"""

from nullobjgen.generator.code_writer import CodeWriter
from nullobjgen.generator.extractor import MemberModelExtractor
from nullobjgen.generator.meta import (
    MethodDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeMeta,
)
from nullobjgen.generator.pipeline import (
    GeneratedSource,
    GenerationResult,
    NullObjPipeline,
    generate_from_files,
)
from nullobjgen.generator.policy import SideEffectPolicy
from nullobjgen.generator.synthesizer import StubSynthesizer

__all__ = [
    "CodeWriter",
    "GeneratedSource",
    "GenerationResult",
    "MemberModelExtractor",
    "MethodDescriptor",
    "NullObjPipeline",
    "ParameterDescriptor",
    "PropertyDescriptor",
    "SideEffectPolicy",
    "StubSynthesizer",
    "TypeMeta",
    "generate_from_files",
]
