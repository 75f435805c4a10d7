"""Interface abstraite des adaptateurs de shell.

Un adaptateur encapsule les règles d'un dialecte de shell : échappement,
quoting, référence aux variables d'environnement, assemblage de la
ligne de commande et lancement. Les adaptateurs sont sans état et
partagés par tous les appelants.
"""

import re
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from cli_tool_utils.errors.exceptions import ExecutionError
from cli_tool_utils.shell.process import (DEFAULT_TIMEOUT, ProcessOutput,
                                          StdinData, run_process)

NEEDS_QUOTING_PATTERN = re.compile(r"[\s&*()\[\]{}|;<>?`~!@%\"]")


@dataclass(frozen=True)
class AliasInfo:
    """Alias de shell détecté.

    Attributes:
        definition: Texte brut renvoyé par le shell.
        target: Premier mot de la cible de l'alias (commande effective).
    """

    definition: str
    target: str


class ShellAdapter(ABC):
    """Stratégie d'un dialecte de shell.

    Attributes:
        NAME: Identifiant du shell (``bash``, ``cmd``...).
        PLATFORM_GROUP: ``unix``, ``windows`` ou ``powershell``.
        EXECUTABLES: Noms d'exécutables candidats, par préférence.
        ENCODING: Encodage des flux du processus.
    """

    NAME: str = ""
    PLATFORM_GROUP: str = "unix"
    EXECUTABLES: Tuple[str, ...] = ()
    ENCODING: str = "utf-8"

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def platform_group(self) -> str:
        return self.PLATFORM_GROUP

    @abstractmethod
    def escape(self, value: str) -> str:
        """Échappe une valeur pour le contexte de quoting du shell."""
        pass

    @abstractmethod
    def quote(self, value: str) -> str:
        """Entoure une valeur de quotes pour qu'elle reste un seul mot."""
        pass

    @abstractmethod
    def env_var(self, name: str) -> str:
        """Référence à une variable d'environnement (``$NAME``...)."""
        pass

    @abstractmethod
    def join(self, executable: str, *args: str) -> str:
        """Assemble exécutable et arguments en une ligne de commande."""
        pass

    @abstractmethod
    def command_argv(
        self, executable: str, args: Sequence[str]
    ) -> Union[List[str], str]:
        """Ligne de commande effectivement passée au système."""
        pass

    def display_command(self, executable: str, args: Sequence[str]) -> str:
        """Commande réellement interprétée par le shell, pour les traces."""
        return self.join(executable, *args)

    def needs_quoting(self, value: str) -> bool:
        """True pour une chaîne vide, un blanc ou un métacaractère."""
        text = str(value)
        if text == "":
            return True
        return NEEDS_QUOTING_PATTERN.search(text) is not None

    def format_path(self, path: str) -> str:
        return str(path)

    def headless_environment(
        self, platform: Optional[str] = None
    ) -> Dict[str, str]:
        """Variables empêchant l'initialisation d'une interface graphique."""
        return {}

    @classmethod
    def detect_alias(cls, command_name: str) -> Optional[AliasInfo]:
        """Cherche un alias du shell pour cette commande.

        Les shells sans notion d'alias renvoient toujours None.
        """
        return None

    @classmethod
    def shell_executable(cls) -> Optional[str]:
        """Chemin du binaire du shell, ou None s'il est absent du PATH."""
        for candidate in cls.EXECUTABLES:
            path = shutil.which(candidate)
            if path:
                return path
        return None

    def _require_shell_executable(self, executable: str) -> str:
        path = self.shell_executable()
        if path is None:
            raise ExecutionError(
                f"Shell '{self.NAME}' introuvable dans le PATH "
                f"(candidats : {', '.join(self.EXECUTABLES)})",
                executable=executable,
            )
        return path

    def execute(
        self,
        executable: str,
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        cwd: Optional[str] = None,
    ) -> ProcessOutput:
        """Lance l'exécutable à travers ce shell.

        Args:
            executable: Exécutable résolu.
            args: Arguments déjà ordonnés.
            env: Environnement complet de l'enfant.
            timeout: Délai en secondes.
            cwd: Répertoire de travail.

        Returns:
            ProcessOutput (code, stdout, stderr).

        Raises:
            ExecutionError: Si le shell ou l'exécutable ne peut être lancé.
            ExecutionTimeoutError: Si le délai est dépassé.
        """
        return self.execute_with_stdin(
            executable, args, env=env, timeout=timeout, cwd=cwd,
            stdin_data=None,
        )

    def execute_with_stdin(
        self,
        executable: str,
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        cwd: Optional[str] = None,
        stdin_data: Optional[StdinData] = None,
    ) -> ProcessOutput:
        """Comme execute, en écrivant stdin_data sur l'entrée standard."""
        argv = self.command_argv(executable, list(args))
        try:
            return run_process(
                argv,
                executable,
                env=env,
                timeout=timeout,
                cwd=cwd,
                stdin_data=stdin_data,
                encoding=self.ENCODING,
            )
        except ExecutionError as e:
            if not e.arguments:
                e.arguments = list(args)
            raise
