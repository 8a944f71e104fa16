"""
Front-end plugin interface.

A language plugin is the front end of the generator: it parses sources, builds the
Compilation the extractor reads, finds the annotated declarations, and provides the
marker attribute definitions for its language.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from nullobjgen.config.models import MarkerConfig
from nullobjgen.symbols.compilation import Compilation
from nullobjgen.symbols.model import GenerationTarget


class LanguagePlugin(ABC):
    """Abstract base class for language front ends."""

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the language name (e.g., 'csharp')."""
        pass

    @property
    @abstractmethod
    def supported_versions(self) -> list[str]:
        """Language versions the grammar accepts."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """Return file extensions for this language (e.g., ['.cs'])."""
        pass

    # =========================================================================
    # AST Parsing
    # =========================================================================

    @abstractmethod
    def parse_file(self, file_path: Path) -> Any:
        """
        Parse a file from disk.

        Returns:
            The parser's syntax tree
        """
        pass

    @abstractmethod
    def parse_source(self, source_code: str) -> Any:
        """
        Parse source text.

        Returns:
            The parser's syntax tree
        """
        pass

    # =========================================================================
    # Symbols
    # =========================================================================

    @abstractmethod
    def add_source(self, compilation: Compilation, source_code: str, path: Path) -> None:
        """
        Parse one source and register its unit and declarations.

        Args:
            compilation: Compilation to populate
            source_code: Source text
            path: Path identifying the unit
        """
        pass

    def build_compilation(self, files: list[Path]) -> Compilation:
        """
        Parse every file into one Compilation.

        Args:
            files: Source files, in the order declarations should be discovered

        Returns:
            Populated Compilation
        """
        compilation = Compilation()
        for file_path in files:
            source = file_path.read_text(encoding="utf-8-sig")
            self.add_source(compilation, source, file_path)
        return compilation

    @abstractmethod
    def discover_targets(
        self, compilation: Compilation, markers: MarkerConfig
    ) -> list[GenerationTarget]:
        """
        Find declarations promoted to null objects.

        Args:
            compilation: Populated compilation
            markers: Marker attribute names

        Returns:
            Targets in declaration order
        """
        pass

    # =========================================================================
    # Generated Support Code
    # =========================================================================

    @abstractmethod
    def attribute_source(self, markers: MarkerConfig) -> str:
        """Return source defining the marker attributes and the policy enum."""
        pass
