"""
    LoggerErrorHandler
"""
from typing import List

from cli_tool_utils.errors.base import ErrorHandler
from cli_tool_utils.errors.exceptions import (ApplicationError,
                                              ExecutionError,
                                              ExecutionTimeoutError,
                                              ValidationError)
from cli_tool_utils.logging.base import Logger


class LoggerErrorHandler(ErrorHandler):
    """Handler pour logger les erreurs.

    Enregistre les erreurs dans le fichier de log via le Logger
    injecté au constructeur. Une erreur connue donne une ligne de
    résumé, suivie du contexte d'exécution qu'elle porte (commande,
    code de sortie, contrainte violée).
    """

    def __init__(self,
                 logger: Logger,
                 base_error_type: type[Exception] = ApplicationError
                 ) -> None:
        """Initialise le handler avec un logger.

        Args:
            logger: Instance de Logger pour l'enregistrement des erreurs.
            base_error_type: Classe de base des erreurs connues.
        """
        self.logger = logger
        self.base_error_type = base_error_type

    def handle(self, error: Exception) -> None:
        """Log l'erreur, puis son contexte s'il s'agit d'une erreur connue.

        Args:
            error: L'exception à logger.
        """
        name = type(error).__name__
        if not isinstance(error, self.base_error_type):
            self.logger.log_error(f"Erreur inattendue: {name}: {error}")
            return

        # le message d'un échec reprend stdout/stderr : première ligne seule
        lines = str(error).splitlines()
        self.logger.log_error(f"{name}: {lines[0] if lines else ''}")
        for detail in self.details(error):
            self.logger.log_error(f"  {detail}")

    @staticmethod
    def details(error: Exception) -> List[str]:
        """Contexte d'exécution porté par l'erreur, une ligne par élément."""
        if isinstance(error, ExecutionTimeoutError):
            if error.command:
                return [f"Commande : {error.command}"]
            return []
        if isinstance(error, ExecutionError):
            result = error.result
            if result is None:
                details = []
                if error.executable:
                    details.append(f"Exécutable : {error.executable}")
                if error.arguments:
                    details.append(f"Arguments : {error.arguments}")
                return details
            details = [
                f"Commande ({result.shell}) : {result.command}",
                f"Code de sortie : {result.exit_status}",
            ]
            stderr = result.stderr.strip()
            if stderr:
                details.append(f"Stderr : {stderr.splitlines()[-1]}")
            return details
        if isinstance(error, ValidationError) and error.constraint:
            return [f"Contrainte : {error.constraint}"]
        return []
