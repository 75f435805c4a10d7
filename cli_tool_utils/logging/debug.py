"""Traces de diagnostic activées par la variable CLI_TOOL_UTILS_DEBUG.

Les décisions de quoting et de construction d'arguments sont écrites
sur stderr, préfixées par ``[cli_tool_utils]``, via un logger stdlib
dédié qui ne propage pas vers le logger racine.
"""

import logging
import os
import sys
from typing import Mapping, Optional

DEBUG_ENV_VAR = "CLI_TOOL_UTILS_DEBUG"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Indique si la variable de debug est positionnée à une valeur vraie."""
    env = os.environ if environ is None else environ
    return env.get(DEBUG_ENV_VAR, "").strip().lower() in _TRUE_VALUES


class DebugTracer:
    """Écrit des diagnostics courts sur stderr quand il est actif.

    Attributes:
        enabled: True si les traces sont émises.
    """

    def __init__(self, enabled: Optional[bool] = None) -> None:
        """
        Args:
            enabled: Forcer l'activation ; None lit CLI_TOOL_UTILS_DEBUG.
        """
        self.enabled = debug_enabled() if enabled is None else enabled
        self._logger = logging.getLogger("cli_tool_utils.debug")
        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("[cli_tool_utils] %(message)s"))
            self._logger.addHandler(handler)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

    def trace(self, message: str) -> None:
        """Émet un message si le traceur est actif."""
        if self.enabled:
            self._logger.debug(message)

    def section(self, title: str, **fields: object) -> None:
        """Émet un titre suivi d'une ligne ``clé: valeur`` par champ."""
        if not self.enabled:
            return
        self._logger.debug(f"== {title} ==")
        for key, value in fields.items():
            self._logger.debug(f"  {key}: {value!r}")
