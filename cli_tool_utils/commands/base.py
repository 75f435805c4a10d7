"""Interface abstraite pour l'exécution de commandes.

Ce module définit CommandExecutor, le contrat des exécuteurs qui lancent
un exécutable résolu à travers un adaptateur de shell et retournent un
ExecutionResult.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from cli_tool_utils.models.result import ExecutionResult
from cli_tool_utils.shell.base import ShellAdapter


class CommandExecutor(ABC):
    """Interface abstraite pour l'exécution de commandes."""

    @abstractmethod
    def run(
        self,
        executable: str,
        args: Sequence[str],
        shell: ShellAdapter,
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
        stdin: Optional[Any] = None,
        allow_failure: bool = False,
    ) -> ExecutionResult:
        """Exécute une commande et retourne le résultat.

        Args:
            executable: Exécutable résolu.
            args: Arguments ordonnés.
            shell: Adaptateur du shell de lancement.
            env: Variables d'environnement supplémentaires.
            cwd: Répertoire de travail.
            timeout: Timeout en secondes.
            stdin: Données pour l'entrée standard.
            allow_failure: Retourner un résultat au lieu de lever
                sur un code non nul ou un lancement impossible.

        Returns:
            Résultat de l'exécution.
        """
        pass
