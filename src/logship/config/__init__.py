"""
Configuration model and loader for logship.
"""

from logship.config.models import (
    Declaration,
    RedisOutput,
    ElasticsearchOutput,
    StdoutOutput,
    JsonLogInput,
    IISLogInput,
    OSEventInput,
    LogInput,
    TcpInput,
    StdinInput,
    Configuration,
    OUTPUT_SECTIONS,
    INPUT_SECTIONS,
)
from logship.config.loader import (
    load_configuration,
    load_file,
    load_directory,
)

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
    "load_configuration",
    "load_file",
    "load_directory",
]
