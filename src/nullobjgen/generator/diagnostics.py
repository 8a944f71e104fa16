"""
Diagnostics reported by the generator.

Every failure for a target ends up as one Diagnostic handed to a DiagnosticSink;
nothing propagates from one target to the next.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from nullobjgen.symbols.model import SourceLocation

logger = logging.getLogger(__name__)

CATEGORY = "NullObjectGenerator"


class DiagnosticSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def log_level(self) -> int:
        return {
            DiagnosticSeverity.ERROR: logging.ERROR,
            DiagnosticSeverity.WARNING: logging.WARNING,
            DiagnosticSeverity.INFO: logging.INFO,
        }[self]


@dataclass(frozen=True)
class DiagnosticDescriptor:
    id: str
    title: str
    message_format: str
    category: str = CATEGORY
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR


UNEXPECTED_ERROR = DiagnosticDescriptor(
    id="NULLOBJ001",
    title="Unexpected error during source code generation",
    message_format="Unexpected error occurred during source code generation: {0}",
    category="Usage",
)

TARGET_UNRESOLVED = DiagnosticDescriptor(
    id="NULLOBJ002",
    title="Null object target not found",
    message_format="Type declaration or symbol could not be determined for '{0}'",
)

NOT_EXTENSIBLE = DiagnosticDescriptor(
    id="NULLOBJ003",
    title="Null object target cannot be implemented",
    message_format="The type '{0}' cannot have a null object implementation: {1}",
)

REQUIRED_NAME_MISSING = DiagnosticDescriptor(
    id="NULLOBJ004",
    title="Null object name not found",
    message_format="A required name could not be determined in '{0}': {1}",
)

BASE_INTERFACE_UNRESOLVED = DiagnosticDescriptor(
    id="NULLOBJ005",
    title="Base type not found",
    message_format="Base type '{1}' of '{0}' is not declared in the sources; its members are not stubbed",
    severity=DiagnosticSeverity.WARNING,
)

DUPLICATE_OUTPUT = DiagnosticDescriptor(
    id="NULLOBJ006",
    title="Generated file name already used",
    message_format="Generated file name '{0}' for '{1}' is already used by '{2}'",
)


@dataclass(frozen=True)
class Diagnostic:
    descriptor: DiagnosticDescriptor
    location: SourceLocation | None = None
    arguments: tuple[str, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def severity(self) -> DiagnosticSeverity:
        return self.descriptor.severity

    @property
    def message(self) -> str:
        return self.descriptor.message_format.format(*self.arguments)

    @classmethod
    def create(
        cls,
        descriptor: DiagnosticDescriptor,
        location: SourceLocation | None,
        *arguments: object,
    ) -> "Diagnostic":
        return cls(descriptor, location, tuple(str(a) for a in arguments))

    def __str__(self) -> str:
        where = f"{self.location}: " if self.location else ""
        return f"{where}{self.severity.value} {self.id}: {self.message}"


class DiagnosticSink(Protocol):
    """Receives diagnostics; called independently for each target, in any order."""

    def report(self, diagnostic: Diagnostic) -> None:
        ...


class DiagnosticBag:
    """Collects diagnostics in report order and mirrors them to the log."""

    def __init__(self):
        self.diagnostics: list[Diagnostic] = []

    def report(self, diagnostic: Diagnostic) -> None:
        logger.log(diagnostic.severity.log_level, str(diagnostic))
        self.diagnostics.append(diagnostic)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)

    def __iter__(self):
        return iter(self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)


# =============================================================================
# Exceptions raised while extracting or synthesizing one target
# =============================================================================


class GenerationError(Exception):
    """A target-level failure with a known diagnostic."""

    descriptor: DiagnosticDescriptor = UNEXPECTED_ERROR

    def __init__(self, *arguments: object, location: SourceLocation | None = None):
        self.arguments = arguments
        self.location = location
        super().__init__(self.descriptor.message_format.format(*arguments))

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic.create(self.descriptor, self.location, *self.arguments)


class TargetUnresolvedError(GenerationError):
    descriptor = TARGET_UNRESOLVED


class NotExtensibleError(GenerationError):
    descriptor = NOT_EXTENSIBLE


class RequiredNameMissingError(GenerationError):
    descriptor = REQUIRED_NAME_MISSING
