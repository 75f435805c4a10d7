"""Formateurs pour l'affichage des messages d'exécution.

Ce module fournit une hiérarchie de formateurs permettant d'afficher
les messages d'exécution différemment selon la destination (fichier de
log ou console). Chaque message est préfixé par le shell utilisé
(``[bash]``, ``[powershell]``...).

Classes :
    CommandFormatter : Interface abstraite de formatage.
    PlainCommandFormatter : Texte brut, pour les logs fichier.
    AnsiCommandFormatter : Codes ANSI colorés pour la console.

Example :
    Utilisation typique avec ProcessExecutor :

        from cli_tool_utils.commands import (
            ProcessExecutor,
            AnsiCommandFormatter,
        )

        executor = ProcessExecutor(
            logger=logger,
            console_formatter=AnsiCommandFormatter(),
        )

Note :
    AnsiCommandFormatter vérifie automatiquement si la sortie est
    un terminal (TTY) avant d'émettre des codes ANSI, évitant
    ainsi de polluer les pipes ou les redirections.
"""

import sys
from abc import ABC, abstractmethod


class CommandFormatter(ABC):
    """Interface abstraite pour formater les messages d'exécution."""

    @abstractmethod
    def format_start(self, command: str, shell: str) -> str:
        """Formate le message de début d'exécution.

        Args:
            command: Ligne de commande formatée pour le shell.
            shell: Nom du shell utilisé.

        Returns:
            Message formaté prêt à l'affichage.
        """
        pass

    @abstractmethod
    def format_failure(self, command: str, shell: str, exit_status: int) -> str:
        """Formate le message d'une sortie en erreur (code non nul)."""
        pass

    @abstractmethod
    def format_timeout(self, command: str, shell: str, timeout: float) -> str:
        """Formate le message d'un dépassement de délai."""
        pass

    @abstractmethod
    def format_spawn_error(self, command: str, shell: str, error: str) -> str:
        """Formate le message d'un échec de lancement."""
        pass


class PlainCommandFormatter(CommandFormatter):
    """Formateur texte brut pour les logs fichier.

    Example :
        [bash] Exécution : 'magick' 'convert' 'a.png' 'b.png'
    """

    def _prefix(self, shell: str) -> str:
        return f"[{shell}]"

    def format_start(self, command: str, shell: str) -> str:
        return f"{self._prefix(shell)} Exécution : {command}"

    def format_failure(self, command: str, shell: str, exit_status: int) -> str:
        return f"{self._prefix(shell)} Code retour {exit_status} : {command}"

    def format_timeout(self, command: str, shell: str, timeout: float) -> str:
        return f"{self._prefix(shell)} Timeout après {timeout}s : {command}"

    def format_spawn_error(self, command: str, shell: str, error: str) -> str:
        return f"{self._prefix(shell)} Lancement impossible : {command} ({error})"


class AnsiCommandFormatter(CommandFormatter):
    """Formateur ANSI coloré pour la sortie console.

    Styles ANSI :
        début   → \\033[0;32m (vert)
        échec   → \\033[1;31m (rouge gras)
        timeout → \\033[1;33m (jaune-or gras)
        reset   → \\033[0m

    N'émet aucun code ANSI si stdout n'est pas un terminal TTY.
    """

    RESET = "\033[0m"
    START_STYLE = "\033[0;32m"
    FAILURE_STYLE = "\033[1;31m"
    TIMEOUT_STYLE = "\033[1;33m"

    def __init__(self) -> None:
        self._plain = PlainCommandFormatter()

    def _is_tty(self) -> bool:
        """Vérifie si stdout est un terminal interactif (TTY)."""
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

    def _apply_style(self, text: str, style: str) -> str:
        if not self._is_tty():
            return text
        return f"{style}{text}{self.RESET}"

    def format_start(self, command: str, shell: str) -> str:
        return self._apply_style(
            self._plain.format_start(command, shell), self.START_STYLE
        )

    def format_failure(self, command: str, shell: str, exit_status: int) -> str:
        return self._apply_style(
            self._plain.format_failure(command, shell, exit_status),
            self.FAILURE_STYLE,
        )

    def format_timeout(self, command: str, shell: str, timeout: float) -> str:
        return self._apply_style(
            self._plain.format_timeout(command, shell, timeout),
            self.TIMEOUT_STYLE,
        )

    def format_spawn_error(self, command: str, shell: str, error: str) -> str:
        return self._apply_style(
            self._plain.format_spawn_error(command, shell, error),
            self.FAILURE_STYLE,
        )
