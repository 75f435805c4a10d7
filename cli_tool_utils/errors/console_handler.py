"""
    ConsoleErrorHandler (générique, configurable)
"""
from typing import Optional

from cli_tool_utils.errors.base import ErrorHandler
from cli_tool_utils.errors.exceptions import (ApplicationError,
                                              ConfigurationError,
                                              ExecutableNotFoundError,
                                              ExecutionError,
                                              ExecutionTimeoutError,
                                              UnknownShellError,
                                              ValidationError,
                                              VersionDetectionError)


class ConsoleErrorHandler(ErrorHandler):
    """Handler pour afficher les erreurs dans la console.

    Distingue les erreurs connues (dérivées de base_error_type)
    des erreurs inattendues, et affiche un message de solution
    adapté au type d'erreur.
    """

    DEFAULT_SOLUTIONS: dict[type[Exception], str] = {
        ValidationError: (
            "Vérifiez le type, la plage ou les valeurs autorisées "
            "du paramètre dans la définition de commande."
        ),
        ExecutableNotFoundError: (
            "Installez l'outil ou ajoutez son répertoire au PATH."
        ),
        ExecutionTimeoutError: (
            "Augmentez le délai (CLI_TOOL_UTILS_TIMEOUT) ou vérifiez "
            "que l'outil n'attend pas d'entrée."
        ),
        UnknownShellError: (
            "Shells supportés : bash, zsh, fish, sh, dash, tcsh, "
            "powershell, cmd (CLI_TOOL_UTILS_SHELL)."
        ),
        ExecutionError: (
            "Consultez le code de sortie et stderr de la commande."
        ),
        ConfigurationError: "Vérifiez votre fichier de configuration.",
        VersionDetectionError: (
            "Installez une version compatible ou ajustez l'exigence."
        ),
    }

    def __init__(
        self,
        base_error_type: type[Exception] = ApplicationError,
        solutions: Optional[dict[type[Exception], str]] = None
    ) -> None:
        """Initialise le handler console.

        Args:
            base_error_type: Classe de base pour distinguer erreurs connues/inconnues
                             (défaut: ApplicationError).
            solutions: Dictionnaire {TypeException: "message solution"},
                       prioritaire sur les solutions par défaut.
        """
        self.base_error_type = base_error_type
        self.solutions = dict(self.DEFAULT_SOLUTIONS)
        self.solutions.update(solutions or {})

    def handle(self, error: Exception) -> None:
        """Affiche l'erreur dans la console avec des messages utilisateur.

        Args:
            error: L'exception à afficher.
        """
        if isinstance(error, self.base_error_type):
            self._handle_known_error(error)
        else:
            self._handle_unknown_error(error)

    def _solution_for(self, error: Exception) -> str:
        """Retourne la solution du type le plus spécifique connu."""
        for error_type in type(error).__mro__:
            if error_type in self.solutions:
                return self.solutions[error_type]
        return "Voir les suggestions ci-dessus."

    def _handle_known_error(self, error: Exception) -> None:
        """Gère les erreurs connues du projet.

        Args:
            error: L'exception métier à traiter.
        """
        print(f"\n🛑 {type(error).__name__}: {str(error)}")
        print(f"\n🔧 Solution : {self._solution_for(error)}")

    def _handle_unknown_error(self, error: Exception) -> None:
        """Gère les erreurs inattendues.

        Args:
            error: L'exception non prévue à afficher.
        """
        print(f"\n💥 Erreur inattendue: {str(error)}")
        print(f"Type: {type(error).__name__}")
        print(
            "\n📋 Cela peut être un bug. Veuillez ouvrir une issue avec ces informations."
        )
