"""Détection de la plateforme et du shell courants."""

import os
import sys
from typing import Mapping, Optional

from cli_tool_utils.errors.exceptions import (UnknownShellError,
                                              UnsupportedPlatformError)

PLATFORMS = ("macos", "linux", "windows")
SHELL_NAMES = ("bash", "zsh", "fish", "sh", "dash", "tcsh", "powershell", "cmd")

_SHELL_BASENAMES = {
    "bash": "bash",
    "zsh": "zsh",
    "fish": "fish",
    "sh": "sh",
    "dash": "dash",
    "tcsh": "tcsh",
    "csh": "tcsh",
    "pwsh": "powershell",
    "powershell": "powershell",
}


def detect_platform(sys_platform: Optional[str] = None) -> str:
    """Retourne ``macos``, ``linux`` ou ``windows``.

    Args:
        sys_platform: Valeur à analyser (défaut: sys.platform).

    Raises:
        UnsupportedPlatformError: Si la plateforme n'est pas reconnue.
    """
    value = (sys_platform or sys.platform).lower()
    if value.startswith(("win32", "cygwin", "msys")):
        return "windows"
    if value.startswith("darwin"):
        return "macos"
    if value.startswith("linux"):
        return "linux"
    raise UnsupportedPlatformError(
        f"Plateforme non supportée : {value}. Plateformes supportées : "
        f"{', '.join(PLATFORMS)} (configurable via CLI_TOOL_UTILS_PLATFORM)"
    )


def shell_from_path(shell_path: str) -> Optional[str]:
    """Nom de shell supporté correspondant à un chemin (``/bin/zsh``)."""
    normalized = shell_path.strip().replace("\\", "/")
    basename = os.path.basename(normalized).lower()
    if basename.endswith(".exe"):
        basename = basename[:-4]
    return _SHELL_BASENAMES.get(basename)


def detect_shell(
    platform: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Détermine le shell courant.

    Sous Windows : ``powershell`` si PSModulePath est défini, ``bash``
    sous MSYS / Git Bash / WSL, sinon ``cmd``. Ailleurs : nom de base
    de ``$SHELL``.

    Args:
        platform: Plateforme (défaut: détectée).
        environ: Environnement à inspecter (défaut: os.environ).

    Returns:
        Un nom de SHELL_NAMES.

    Raises:
        UnknownShellError: Si $SHELL est absent ou non supporté.
    """
    env = os.environ if environ is None else environ
    platform = platform or detect_platform()

    if platform == "windows":
        if (env.get("MSYSTEM") or env.get("MINGW_PREFIX")
                or env.get("WSL_DISTRO_NAME")):
            return "bash"
        if env.get("PSModulePath"):
            return "powershell"
        return "cmd"

    shell_env = env.get("SHELL")
    if not shell_env:
        raise UnknownShellError(
            "",
            "Variable SHELL non définie ; précisez le shell via "
            "CLI_TOOL_UTILS_SHELL",
        )
    name = shell_from_path(shell_env)
    if name is None:
        raise UnknownShellError(
            shell_env,
            f"Shell non supporté : {shell_env} (supportés : "
            f"{', '.join(SHELL_NAMES)})",
        )
    return name
