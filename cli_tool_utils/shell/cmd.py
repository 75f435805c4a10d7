"""Adaptateur cmd.exe."""

import locale
import re
from typing import Sequence

from cli_tool_utils.shell.base import ShellAdapter

_CARET_SPECIALS = re.compile(r"([%^<>&|])")
_WHITESPACE = re.compile(r"[ \t]")
# Opérateurs laissés intacts après /c pour que cmd.exe les interprète
COMMAND_OPERATORS = frozenset({"&&", "||", "|", "&"})


class CmdAdapter(ShellAdapter):
    """cmd.exe : échappement par caret, quotes doubles seulement sur blanc.

    Après ``/c``, cmd.exe relit tout le reste comme une seule ligne de
    commande : ces jetons sont concaténés sans quotes (des quotes y
    deviendraient littérales), chacun échappé au caret sauf les
    opérateurs ``&&``, ``||``, ``|`` et ``&``.
    """

    NAME = "cmd"
    PLATFORM_GROUP = "windows"
    EXECUTABLES = ("cmd",)
    ENCODING = locale.getpreferredencoding(False)

    def escape(self, value: str) -> str:
        return _CARET_SPECIALS.sub(r"^\1", str(value))

    def quote(self, value: str) -> str:
        text = str(value)
        if text == "":
            return '""'
        if _WHITESPACE.search(text):
            return f'"{text}"'
        return self.escape(text)

    def format_path(self, path: str) -> str:
        return str(path).replace("/", "\\")

    def env_var(self, name: str) -> str:
        return f"%{name}%"

    def _token(self, value: str) -> str:
        return self.quote(value) if self.needs_quoting(value) else self.escape(value)

    def join(self, executable: str, *args: str) -> str:
        parts = [self._token(executable)]
        if len(args) > 1 and args[0].lower() == "/c":
            command = " ".join(
                arg if arg in COMMAND_OPERATORS else self.escape(arg)
                for arg in args[1:]
            )
            parts.extend([args[0], command])
        else:
            parts.extend(self._token(arg) for arg in args)
        return " ".join(parts)

    def command_argv(self, executable: str, args: Sequence[str]) -> str:
        """Chaîne brute ``cmd /d /s /c "<ligne>"``.

        Une chaîne (et non une liste) évite que subprocess ne réécrive
        les quotes avec ses règles MSVC, que cmd.exe ne comprend pas.
        """
        shell = self._require_shell_executable(executable)
        return f'"{shell}" /d /s /c "{self.join(executable, *args)}"'
