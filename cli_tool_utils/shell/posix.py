"""Adaptateurs de la famille POSIX : bash, zsh, fish, sh, dash.

Le comportement commun (quotes simples, ``$NAME``, environnement
headless, interrogation des alias) vit dans PosixQuoting et run_alias_query.
bash, zsh, sh et dash partagent le même dialecte (PosixAdapter) ; fish
implémente ShellAdapter directement et délègue à son propre PosixQuoting.
"""

import re
import subprocess  # nosec B404
from typing import Dict, List, Optional, Sequence

from cli_tool_utils.shell.base import (AliasInfo, NEEDS_QUOTING_PATTERN,
                                       ShellAdapter)
from cli_tool_utils.shell.detection import detect_platform

ALIAS_QUERY_TIMEOUT = 5

_MACOS_HEADLESS = {
    "NSAppleEventsSuppressStartupAlert": "true",
    "NSUIElement": "1",
    "GDK_BACKEND": "x11",
}


class PosixQuoting:
    """Règles de quoting POSIX : tout mot est entouré de quotes simples.

    Une quote simple embarquée devient ``'\\''`` (fermeture, quote
    échappée, réouverture).

    Attributes:
        double_backslashes: Doubler ``\\`` avant les quotes (fish, où
            ``\\\\`` et ``\\'`` sont des séquences dans les quotes simples).
        escape_history: Protéger ``!`` de l'expansion d'historique (tcsh).
    """

    def __init__(
        self, double_backslashes: bool = False, escape_history: bool = False
    ) -> None:
        self.double_backslashes = double_backslashes
        self.escape_history = escape_history

    def escape(self, value: str) -> str:
        text = str(value)
        if self.double_backslashes:
            text = text.replace("\\", "\\\\")
        return text.replace("'", "'\\''")

    def quote(self, value: str) -> str:
        escaped = self.escape(value)
        if self.escape_history:
            escaped = escaped.replace("!", "\\!")
        return f"'{escaped}'"

    def needs_quoting(self, value: str) -> bool:
        text = str(value)
        return text == "" or NEEDS_QUOTING_PATTERN.search(text) is not None

    def env_var(self, name: str) -> str:
        return f"${name}"

    def join(self, executable: str, args: Sequence[str]) -> str:
        return " ".join(self.quote(token) for token in (executable, *args))

    def headless_environment(self, platform: Optional[str]) -> Dict[str, str]:
        env = {"DISPLAY": ""}
        if platform == "macos":
            env.update(_MACOS_HEADLESS)
        return env


_ALIAS_LINE = re.compile(
    r"^(?P<name>\S+) is (?:aliased to|an alias for|alias for|alias) (?P<body>.*)$"
)
_FISH_ALIAS = re.compile(r"alias (?P<name>[^=\s]+)=(?P<body>[^']*)")


def parse_alias_output(command_name: str, output: str) -> Optional[AliasInfo]:
    """Extrait un alias de la sortie de ``type NAME``.

    Reconnaît les formats de bash (``is aliased to `...'``), de
    zsh / dash (``is an alias for ...``) et de fish
    (``--description 'alias NAME=...'``).
    """
    for line in output.splitlines():
        line = line.strip()
        match = _ALIAS_LINE.match(line)
        if match and match.group("name") == command_name:
            body = match.group("body").strip().strip("`'\"")
            return _alias_info(line, body)
        match = _FISH_ALIAS.search(line)
        if match and match.group("name") == command_name:
            return _alias_info(line, match.group("body").strip())
    return None


def _alias_info(definition: str, body: str) -> Optional[AliasInfo]:
    words = body.split()
    if not words:
        return None
    return AliasInfo(definition=definition, target=words[0].strip("'\""))


def run_alias_query(shell: Optional[str], command: str) -> Optional[str]:
    """Lance une interrogation d'alias non interactive ; sa sortie, ou None.

    Un shell absent, une commande en échec ou trop longue valent None.
    """
    if shell is None:
        return None
    try:
        completed = subprocess.run(  # nosec B603
            [shell, "-c", command],
            capture_output=True,
            text=True,
            timeout=ALIAS_QUERY_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout


class PosixAdapter(ShellAdapter):
    """Dialecte commun à bash, zsh, sh et dash.

    La ligne de commande est lancée par ``<shell> -c <commande>``.
    """

    PLATFORM_GROUP = "unix"
    QUOTING: PosixQuoting = PosixQuoting()

    def escape(self, value: str) -> str:
        return self.QUOTING.escape(value)

    def quote(self, value: str) -> str:
        return self.QUOTING.quote(value)

    def needs_quoting(self, value: str) -> bool:
        return self.QUOTING.needs_quoting(value)

    def env_var(self, name: str) -> str:
        return self.QUOTING.env_var(name)

    def join(self, executable: str, *args: str) -> str:
        return self.QUOTING.join(executable, args)

    def headless_environment(
        self, platform: Optional[str] = None
    ) -> Dict[str, str]:
        return self.QUOTING.headless_environment(platform or detect_platform())

    def command_argv(self, executable: str, args: Sequence[str]) -> List[str]:
        shell = self._require_shell_executable(executable)
        return [shell, "-c", self.join(executable, *args)]

    @classmethod
    def alias_query(cls, command_name: str) -> str:
        """Commande shell interrogeant un alias."""
        return f"type {cls.QUOTING.quote(command_name)}"

    @classmethod
    def detect_alias(cls, command_name: str) -> Optional[AliasInfo]:
        output = run_alias_query(
            cls.shell_executable(), cls.alias_query(command_name)
        )
        if output is None:
            return None
        return cls.parse_alias(command_name, output)

    @classmethod
    def parse_alias(
        cls, command_name: str, output: str
    ) -> Optional[AliasInfo]:
        return parse_alias_output(command_name, output)


class BashAdapter(PosixAdapter):
    NAME = "bash"
    EXECUTABLES = ("bash",)


class ZshAdapter(PosixAdapter):
    NAME = "zsh"
    EXECUTABLES = ("zsh",)


class FishAdapter(ShellAdapter):
    """fish : mêmes quotes simples, mais les backslashes y sont doublés.

    ``type NAME`` sous fish affiche la fonction générée par ``alias``,
    reconnue par parse_alias_output.
    """

    NAME = "fish"
    PLATFORM_GROUP = "unix"
    EXECUTABLES = ("fish",)
    QUOTING = PosixQuoting(double_backslashes=True)

    def escape(self, value: str) -> str:
        return self.QUOTING.escape(value)

    def quote(self, value: str) -> str:
        return self.QUOTING.quote(value)

    def needs_quoting(self, value: str) -> bool:
        return self.QUOTING.needs_quoting(value)

    def env_var(self, name: str) -> str:
        return self.QUOTING.env_var(name)

    def join(self, executable: str, *args: str) -> str:
        return self.QUOTING.join(executable, args)

    def headless_environment(
        self, platform: Optional[str] = None
    ) -> Dict[str, str]:
        return self.QUOTING.headless_environment(platform or detect_platform())

    def command_argv(self, executable: str, args: Sequence[str]) -> List[str]:
        shell = self._require_shell_executable(executable)
        return [shell, "-c", self.join(executable, *args)]

    @classmethod
    def alias_query(cls, command_name: str) -> str:
        return f"type {cls.QUOTING.quote(command_name)}"

    @classmethod
    def detect_alias(cls, command_name: str) -> Optional[AliasInfo]:
        output = run_alias_query(
            cls.shell_executable(), cls.alias_query(command_name)
        )
        if output is None:
            return None
        return parse_alias_output(command_name, output)


class ShAdapter(PosixAdapter):
    NAME = "sh"
    EXECUTABLES = ("sh",)


class DashAdapter(PosixAdapter):
    NAME = "dash"
    EXECUTABLES = ("dash",)
