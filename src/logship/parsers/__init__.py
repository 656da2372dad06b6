"""
Parser registry and built-in parsers for logship.
"""

from typing import Type

from logship.core.base import BaseParser

__all__ = [
    "ParserRegistry",
    "registry",
    "BaseParser",
]


class ParserRegistry:
    """
    Central registry for all available parsers.

    Manages parser registration and lookup by format name. Lookups
    return a fresh instance, since parsers may carry per-stream state.

    Usage:
        from logship.parsers import registry

        parser = registry.get_parser("iis")
        record = parser.parse_line(line)
    """

    def __init__(self):
        self._parsers: dict[str, Type[BaseParser]] = {}
        self._format_to_parser: dict[str, str] = {}

    def register(self, parser_class: Type[BaseParser]) -> None:
        name = parser_class.name
        self._parsers[name] = parser_class

        for fmt in parser_class.supported_formats:
            self._format_to_parser[fmt] = name

    def get_parser(self, format_name: str) -> BaseParser | None:
        """
        Get a parser instance for the given format.

        Args:
            format_name: Format name or parser name

        Returns:
            Parser instance or None if not found
        """
        parser_name = self._format_to_parser.get(format_name)
        if parser_name and parser_name in self._parsers:
            return self._parsers[parser_name]()

        if format_name in self._parsers:
            return self._parsers[format_name]()

        return None

    def list_parsers(self) -> list[str]:
        return list(self._parsers.keys())

    def list_formats(self) -> list[str]:
        return list(self._format_to_parser.keys())


# Global registry instance
registry = ParserRegistry()


def _register_builtin_parsers() -> None:
    """Register all built-in parsers."""
    # Import here to avoid circular imports
    from logship.parsers.json_parser import JSONParser
    from logship.parsers.w3c import W3CParser
    from logship.parsers.generic import GenericParser

    registry.register(JSONParser)
    registry.register(W3CParser)
    registry.register(GenericParser)


_register_builtin_parsers()
