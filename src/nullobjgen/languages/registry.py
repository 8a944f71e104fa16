"""
Front-end registry.

Maps a configured source language to the plugin that parses it.
"""

from typing import Type

from nullobjgen.config.models import LanguageType
from nullobjgen.languages.base.plugin import LanguagePlugin
from nullobjgen.languages.csharp.plugin import CSharpPlugin


class LanguagePluginRegistry:
    """Front ends by language; one fresh plugin per request."""

    _plugins: dict[LanguageType, Type[LanguagePlugin]] = {
        LanguageType.CSHARP: CSharpPlugin,
    }

    @classmethod
    def get_plugin(cls, language: LanguageType, version: str | None = None) -> LanguagePlugin:
        """
        Instantiate the front end for a language.

        Args:
            language: Configured source language
            version: Language version to parse; the plugin default when omitted

        Raises:
            ValueError: If no front end handles the language or the version
        """
        plugin_class = cls._plugins.get(language)
        if plugin_class is None:
            raise ValueError(
                f"No front end for '{language}'. "
                f"Available: {', '.join(cls.list_supported_languages())}"
            )

        if version is None:
            return plugin_class()
        plugin = plugin_class(version=version)
        if version not in plugin.supported_versions:
            raise ValueError(
                f"{plugin.language_name} {version} is not supported "
                f"(supported: {', '.join(plugin.supported_versions)})"
            )
        return plugin

    @classmethod
    def register_plugin(cls, language: LanguageType, plugin_class: Type[LanguagePlugin]) -> None:
        """Add or replace the front end for a language."""
        if not issubclass(plugin_class, LanguagePlugin):
            raise TypeError(f"{plugin_class} must extend LanguagePlugin")
        cls._plugins[language] = plugin_class

    @classmethod
    def list_supported_languages(cls) -> list[str]:
        return sorted(lang.value for lang in cls._plugins)


def get_plugin(language: LanguageType = LanguageType.CSHARP) -> LanguagePlugin:
    """Front end for a language at its default version."""
    return LanguagePluginRegistry.get_plugin(language)
