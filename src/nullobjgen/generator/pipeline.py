"""
Generation pipeline.

Runs Extractor -> Synthesizer for every discovered target. A target that fails
produces diagnostics and no source; the others are unaffected.
"""

import logging
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from nullobjgen.config.models import NullObjConfig
from nullobjgen.generator.code_writer import CodeWriter
from nullobjgen.generator.diagnostics import (
    BASE_INTERFACE_UNRESOLVED,
    DUPLICATE_OUTPUT,
    UNEXPECTED_ERROR,
    Diagnostic,
    DiagnosticBag,
    DiagnosticSeverity,
    DiagnosticSink,
    GenerationError,
)
from nullobjgen.generator.extractor import MemberModelExtractor
from nullobjgen.generator.meta import TypeMeta
from nullobjgen.generator.policy import SideEffectPolicy
from nullobjgen.generator.synthesizer import StubSynthesizer
from nullobjgen.languages.registry import get_plugin
from nullobjgen.symbols.compilation import Compilation
from nullobjgen.symbols.model import GenerationTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedSource:
    """A file handed to the output: hint name plus full text."""

    hint_name: str
    text: str


@dataclass
class TargetOutcome:
    target: GenerationTarget
    meta: TypeMeta | None = None
    source: GeneratedSource | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.source is not None


@dataclass
class GenerationResult:
    sources: list[GeneratedSource] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    outcomes: list[TargetOutcome] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)

    @property
    def failed_targets(self) -> list[GenerationTarget]:
        return [o.target for o in self.outcomes if not o.succeeded]


class NullObjPipeline:
    """
    Drives generation for a set of targets.

    Usage:
        pipeline = NullObjPipeline(config)
        result = pipeline.run(compilation, targets)
        for source in result.sources:
            print(source.hint_name)
    """

    def __init__(self, config: NullObjConfig | None = None, sink: DiagnosticSink | None = None):
        self.config = config or NullObjConfig()
        self.sink = sink if sink is not None else DiagnosticBag()

    def _new_synthesizer(self) -> StubSynthesizer:
        return StubSynthesizer(self.config.synthesis, CodeWriter(self.config.output.indent_size))

    def run(self, compilation: Compilation, targets: list[GenerationTarget]) -> GenerationResult:
        """
        Generate a stand-in for every target.

        Args:
            compilation: Compilation the targets were discovered in
            targets: Annotated declarations, in output order

        Returns:
            GenerationResult with one source per successful target
        """
        extractor = MemberModelExtractor(compilation)
        # Built once up front so worker threads only read it
        compilation.inheritance_graph()

        jobs = self.config.output.jobs
        if jobs > 1 and len(targets) > 1:
            with ThreadPoolExecutor(max_workers=jobs) as executor:
                outcomes = list(
                    executor.map(
                        lambda t: self.process(extractor, self._new_synthesizer(), t), targets
                    )
                )
        else:
            synthesizer = self._new_synthesizer()
            outcomes = [self.process(extractor, synthesizer, t) for t in targets]

        result = GenerationResult(outcomes=outcomes)
        owners: dict[str, str] = {}
        for outcome in outcomes:
            source = outcome.source
            if source is not None and source.hint_name in owners:
                outcome.diagnostics.append(
                    Diagnostic.create(
                        DUPLICATE_OUTPUT,
                        outcome.target.location,
                        source.hint_name,
                        outcome.target.declaration,
                        owners[source.hint_name],
                    )
                )
                outcome.source = None
            elif source is not None:
                owners[source.hint_name] = outcome.target.declaration
                result.sources.append(source)

            for diagnostic in outcome.diagnostics:
                self.sink.report(diagnostic)
                result.diagnostics.append(diagnostic)

        logger.info(
            f"Generated {len(result.sources)} of {len(targets)} null objects "
            f"({len(result.diagnostics)} diagnostics)"
        )
        return result

    def process(
        self,
        extractor: MemberModelExtractor,
        synthesizer: StubSynthesizer,
        target: GenerationTarget,
    ) -> TargetOutcome:
        """Run one target; every exception becomes a diagnostic on the outcome."""
        outcome = TargetOutcome(target=target)
        try:
            policy = SideEffectPolicy.parse(target.policy_argument)
            meta = extractor.extract(target, policy)
            outcome.diagnostics.extend(self._unresolved_base_warnings(extractor, target))
            text = synthesizer.synthesize(meta, policy)
        except GenerationError as e:
            outcome.diagnostics.append(e.to_diagnostic())
            return outcome
        except Exception:
            outcome.diagnostics.append(
                Diagnostic.create(UNEXPECTED_ERROR, target.location, traceback.format_exc())
            )
            return outcome

        outcome.meta = meta
        outcome.source = GeneratedSource(self.config.generated_file_name(meta.name), text)
        logger.debug(f"Synthesized {outcome.source.hint_name} for {target.declaration}")
        return outcome

    def _unresolved_base_warnings(
        self, extractor: MemberModelExtractor, target: GenerationTarget
    ) -> list[Diagnostic]:
        symbol = target.symbol
        compilation = extractor.compilation
        warnings = []
        symbols = [symbol] + [ref.symbol for ref in extractor.interface_set(symbol)]
        seen: set[tuple[str, str]] = set()
        for owner in symbols:
            for reference in compilation.unresolved_bases(owner):
                key = (owner.display_name, reference)
                if key in seen:
                    continue
                seen.add(key)
                warnings.append(
                    Diagnostic.create(
                        BASE_INTERFACE_UNRESOLVED, owner.location, owner.display_name, reference
                    )
                )
        return warnings


# =============================================================================
# File-level helpers
# =============================================================================


def discover_source_files(
    root: Path, extensions: list[str], exclude_patterns: list[str]
) -> list[Path]:
    """
    Discover source files under root, sorted for stable output.

    Args:
        root: Directory to search, or a single file
        extensions: File extensions to include (e.g. ['.cs'])
        exclude_patterns: Path fragments that exclude a file when present

    Returns:
        Sorted list of source file paths
    """
    if root.is_file():
        return [root]

    files = []
    for ext in extensions:
        for file_path in root.rglob(f"*{ext}"):
            normalized = file_path.as_posix()
            if any(pattern in normalized for pattern in exclude_patterns):
                continue
            files.append(file_path)
    return sorted(set(files))


def attribute_file_name(config: NullObjConfig) -> str:
    return f"NullObjAttribute.g.{config.output.file_extension}"


def generate_from_files(
    files: list[Path],
    config: NullObjConfig | None = None,
    sink: DiagnosticSink | None = None,
) -> GenerationResult:
    """
    Parse files, discover targets and generate every stand-in.

    When enabled, the marker attribute source is the first generated file.
    """
    config = config or NullObjConfig()
    plugin = get_plugin(config.source.language)
    compilation = plugin.build_compilation(files)
    targets = plugin.discover_targets(compilation, config.markers)

    result = NullObjPipeline(config, sink).run(compilation, targets)
    if config.output.emit_attribute_source:
        result.sources.insert(
            0,
            GeneratedSource(attribute_file_name(config), plugin.attribute_source(config.markers)),
        )
    return result


def write_sources(sources: list[GeneratedSource], directory: Path) -> list[Path]:
    """Write generated sources into directory, returning the written paths."""
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for source in sources:
        path = directory / source.hint_name
        path.write_text(source.text, encoding="utf-8")
        written.append(path)
    return written
