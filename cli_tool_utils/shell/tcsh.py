"""Adaptateur tcsh."""

from typing import Dict, List, Optional, Sequence

from cli_tool_utils.shell.base import AliasInfo, ShellAdapter
from cli_tool_utils.shell.detection import detect_platform
from cli_tool_utils.shell.posix import PosixQuoting, run_alias_query


class TcshAdapter(ShellAdapter):
    """tcsh : quotes simples POSIX, ``!`` protégé de l'historique.

    L'alias est interrogé par ``alias NAME``, pas par ``type``.
    """

    NAME = "tcsh"
    PLATFORM_GROUP = "unix"
    EXECUTABLES = ("tcsh", "csh")
    QUOTING = PosixQuoting(escape_history=True)

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
        return f"alias {cls.QUOTING.quote(command_name)}"

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
        definition = output.strip()
        words = definition.split()
        if not words:
            return None
        return AliasInfo(
            definition=f"{command_name} {definition}",
            target=words[0].strip("'\""),
        )
