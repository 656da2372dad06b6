"""
Typed configuration declarations.

A configuration document is a mapping of section name to a list of
declarations; each declaration describes exactly one source or sink.
Declarations are frozen: a loaded Configuration never changes.
"""

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from logship.core.exceptions import ConfigurationInvalid
from logship.parsers import registry as parser_registry

__all__ = [
    "Declaration",
    "RedisOutput",
    "ElasticsearchOutput",
    "StdoutOutput",
    "JsonLogInput",
    "IISLogInput",
    "OSEventInput",
    "LogInput",
    "TcpInput",
    "StdinInput",
    "Configuration",
    "OUTPUT_SECTIONS",
    "INPUT_SECTIONS",
]


@dataclass(frozen=True, kw_only=True)
class Declaration:
    """
    Base class for one configuration entry.

    Attributes:
        kind: Section name, also the tag that selects the concrete class
        role: "input" or "output"
        name: Optional identity used in diagnostics
    """

    kind: ClassVar[str] = ""
    role: ClassVar[str] = ""

    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.kind

    @classmethod
    def from_dict(cls, data: Any, index: int = 0, path: str | None = None) -> "Declaration":
        """
        Build a declaration from one parsed document entry.

        Raises:
            ConfigurationInvalid: If the entry is not an object, has unknown
                keys, misses required keys or holds invalid values
        """
        key = f"{cls.kind}[{index}]"

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationInvalid(
                f"Declaration must be an object, got {type(data).__name__}",
                path=path,
                config_key=key,
            )

        known = {f.name for f in fields(cls)}
        unknown = sorted(str(key) for key in data if key not in known)
        if unknown:
            raise ConfigurationInvalid(
                f"Unknown field(s): {', '.join(unknown)}",
                path=path,
                config_key=key,
            )

        try:
            declaration = cls(**data)
        except TypeError as e:
            raise ConfigurationInvalid(str(e), path=path, config_key=key) from e

        problem = declaration._check_strings() or declaration.validate()
        if problem:
            raise ConfigurationInvalid(problem, path=path, config_key=key)

        return declaration

    def validate(self) -> str | None:
        """Return a description of the first invalid value, or None."""
        if self.name is not None and not isinstance(self.name, str):
            return "name must be a string"
        return None

    def _check_strings(self) -> str | None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is str and not isinstance(value, str):
                return f"{f.name} must be a string, got {value!r}"
        return None


def _check_port(port: Any) -> str | None:
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        return f"port must be an integer between 1 and 65535, got {port!r}"
    return None


def _check_positive(value: Any, label: str) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return f"{label} must be a positive number, got {value!r}"
    return None


# Outputs


@dataclass(frozen=True, kw_only=True)
class RedisOutput(Declaration):
    kind: ClassVar[str] = "redis"
    role: ClassVar[str] = "output"

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key: str = "logship"
    data_type: str = "list"
    batch_size: int = 10

    def validate(self) -> str | None:
        if self.data_type not in ("list", "channel"):
            return f"data_type must be 'list' or 'channel', got {self.data_type!r}"
        return (
            _check_port(self.port)
            or _check_positive(self.batch_size, "batch_size")
            or super().validate()
        )


@dataclass(frozen=True, kw_only=True)
class ElasticsearchOutput(Declaration):
    kind: ClassVar[str] = "elasticsearch"
    role: ClassVar[str] = "output"

    host: str = "localhost"
    port: int = 9200
    protocol: str = "http"
    index: str = "logship-%Y.%m.%d"
    batch_size: int = 10
    timeout: float = 10.0

    def validate(self) -> str | None:
        if self.protocol not in ("http", "https"):
            return f"protocol must be 'http' or 'https', got {self.protocol!r}"
        return (
            _check_port(self.port)
            or _check_positive(self.batch_size, "batch_size")
            or _check_positive(self.timeout, "timeout")
            or super().validate()
        )


@dataclass(frozen=True, kw_only=True)
class StdoutOutput(Declaration):
    kind: ClassVar[str] = "stdout"
    role: ClassVar[str] = "output"

    format: str = "json"

    def validate(self) -> str | None:
        if self.format not in ("json", "compact"):
            return f"format must be 'json' or 'compact', got {self.format!r}"
        return super().validate()


# Inputs


@dataclass(frozen=True, kw_only=True)
class FileInputDeclaration(Declaration):
    """Shared fields of the file tailing inputs."""

    location: str
    start_at: str = "end"
    poll_interval: float = 1.0

    def validate(self) -> str | None:
        if not isinstance(self.location, str) or not self.location:
            return "location must be a non-empty path or glob"
        if self.start_at not in ("beginning", "end"):
            return f"start_at must be 'beginning' or 'end', got {self.start_at!r}"
        return _check_positive(self.poll_interval, "poll_interval") or super().validate()


@dataclass(frozen=True, kw_only=True)
class JsonLogInput(FileInputDeclaration):
    kind: ClassVar[str] = "json_logs"
    role: ClassVar[str] = "input"


@dataclass(frozen=True, kw_only=True)
class IISLogInput(FileInputDeclaration):
    kind: ClassVar[str] = "iis_logs"
    role: ClassVar[str] = "input"


@dataclass(frozen=True, kw_only=True)
class LogInput(FileInputDeclaration):
    kind: ClassVar[str] = "logs"
    role: ClassVar[str] = "input"

    format: str = "generic"

    def validate(self) -> str | None:
        if not isinstance(self.format, str) or parser_registry.get_parser(self.format) is None:
            return f"unknown format {self.format!r}"
        return super().validate()


@dataclass(frozen=True, kw_only=True)
class OSEventInput(Declaration):
    kind: ClassVar[str] = "os_events"
    role: ClassVar[str] = "input"

    command: tuple[str, ...] = ("journalctl", "--follow", "--output=json")

    def __post_init__(self):
        if isinstance(self.command, list):
            object.__setattr__(self, "command", tuple(self.command))

    def validate(self) -> str | None:
        if (
            not isinstance(self.command, tuple)
            or not self.command
            or not all(isinstance(part, str) for part in self.command)
        ):
            return "command must be a non-empty list of strings"
        return super().validate()


@dataclass(frozen=True, kw_only=True)
class TcpInput(Declaration):
    kind: ClassVar[str] = "tcp"
    role: ClassVar[str] = "input"

    port: int
    host: str = "0.0.0.0"

    def validate(self) -> str | None:
        return _check_port(self.port) or super().validate()


@dataclass(frozen=True, kw_only=True)
class StdinInput(Declaration):
    kind: ClassVar[str] = "stdin"
    role: ClassVar[str] = "input"


# Section order is construction order
OUTPUT_SECTIONS: dict[str, type[Declaration]] = {
    "redis": RedisOutput,
    "elasticsearch": ElasticsearchOutput,
    "stdout": StdoutOutput,
}

INPUT_SECTIONS: dict[str, type[Declaration]] = {
    "json_logs": JsonLogInput,
    "iis_logs": IISLogInput,
    "os_events": OSEventInput,
    "logs": LogInput,
    "tcp": TcpInput,
    "stdin": StdinInput,
}


@dataclass(frozen=True)
class Configuration:
    """
    The merged, immutable configuration of one agent.

    Every section is a tuple of declarations in document order. An absent
    section is an empty tuple.
    """

    redis: tuple[RedisOutput, ...] = ()
    elasticsearch: tuple[ElasticsearchOutput, ...] = ()
    stdout: tuple[StdoutOutput, ...] = ()
    json_logs: tuple[JsonLogInput, ...] = ()
    iis_logs: tuple[IISLogInput, ...] = ()
    os_events: tuple[OSEventInput, ...] = ()
    logs: tuple[LogInput, ...] = ()
    tcp: tuple[TcpInput, ...] = ()
    stdin: tuple[StdinInput, ...] = ()

    documents: tuple[str, ...] = field(default=(), compare=False)

    @property
    def outputs(self) -> tuple[Declaration, ...]:
        """Output declarations in construction order."""
        return tuple(d for section in OUTPUT_SECTIONS for d in getattr(self, section))

    @property
    def inputs(self) -> tuple[Declaration, ...]:
        """Input declarations in construction order."""
        return tuple(d for section in INPUT_SECTIONS for d in getattr(self, section))

    def is_empty(self) -> bool:
        return not self.outputs and not self.inputs

    def merge(self, other: "Configuration") -> "Configuration":
        """Concatenate every section, this configuration's entries first."""
        merged = {
            section: getattr(self, section) + getattr(other, section)
            for section in (*OUTPUT_SECTIONS, *INPUT_SECTIONS)
        }
        return Configuration(**merged, documents=self.documents + other.documents)

    @classmethod
    def from_dict(cls, data: Any, path: str | None = None) -> "Configuration":
        """
        Build a configuration from one parsed document.

        Raises:
            ConfigurationInvalid: If the document does not have the expected shape
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationInvalid(
                f"Configuration root must be an object, got {type(data).__name__}",
                path=path,
            )

        sections = {**OUTPUT_SECTIONS, **INPUT_SECTIONS}
        values: dict[str, tuple[Declaration, ...]] = {}

        for section, entries in data.items():
            declaration_class = sections.get(section)
            if declaration_class is None:
                raise ConfigurationInvalid(
                    f"Unknown section '{section}'",
                    path=path,
                    config_key=str(section),
                )
            if entries is None:
                entries = []
            if not isinstance(entries, list):
                raise ConfigurationInvalid(
                    f"Section must be a list, got {type(entries).__name__}",
                    path=path,
                    config_key=section,
                )
            values[section] = tuple(
                declaration_class.from_dict(entry, index=i, path=path)
                for i, entry in enumerate(entries)
            )

        return cls(**values, documents=(path,) if path else ())
