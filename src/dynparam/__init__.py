"""dynparam package root."""

from dynparam.exceptions import (
    ConfigError,
    DynParamError,
    MissingParamBlockError,
    ParseError,
    PayloadError,
)
from dynparam.generation import GenerateSettings, GenerationResult, generate_function

__all__ = [
    "__version__",
    "ConfigError",
    "DynParamError",
    "GenerateSettings",
    "GenerationResult",
    "MissingParamBlockError",
    "ParseError",
    "PayloadError",
    "generate_function",
]

__version__ = "0.1.0"
