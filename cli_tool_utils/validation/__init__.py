"""Module de validation."""

from cli_tool_utils.validation.base import Validator
from cli_tool_utils.validation.parameter import ParameterValidator, stringify

__all__ = [
    "Validator",
    "ParameterValidator",
    "stringify",
]
