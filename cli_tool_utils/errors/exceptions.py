"""
Module contenant les exceptions personnalisées de cli_tool_utils.

Chaque exception porte le contexte nécessaire pour reproduire l'échec
(nom de l'exécutable, paramètre fautif, délai configuré) sans devoir
relancer avec davantage de logs.
"""
from typing import List, Optional, Sequence


class ApplicationError(Exception):
    """Exception de base pour toutes les erreurs de la bibliothèque."""
    pass


class ConfigurationError(ApplicationError):
    """Exception levée pour une configuration invalide."""
    pass


class FileConfigurationError(ConfigurationError):
    """Exception levée pour un fichier de configuration illisible."""
    pass


class UnsupportedPlatformError(ApplicationError):
    """Exception levée quand la plateforme courante n'est pas reconnue."""
    pass


class UnknownShellError(ApplicationError):
    """Exception levée quand aucun adaptateur n'est enregistré pour un shell.

    Attributes:
        shell: Identifiant de shell demandé.
    """

    def __init__(self, shell: str, message: Optional[str] = None) -> None:
        self.shell = shell
        super().__init__(message or f"Shell inconnu : {shell!r}")


class ValidationError(ApplicationError):
    """Exception levée quand un paramètre viole sa contrainte déclarée.

    Attributes:
        parameter_name: Nom du paramètre fautif (peut être None).
        constraint: Description de la contrainte violée.
    """

    def __init__(
        self,
        message: str,
        parameter_name: Optional[str] = None,
        constraint: Optional[str] = None,
    ) -> None:
        self.parameter_name = parameter_name
        self.constraint = constraint
        if parameter_name:
            message = f"Paramètre '{parameter_name}' : {message}"
        super().__init__(message)


class ExecutableNotFoundError(ApplicationError):
    """Exception levée quand un outil est introuvable (alias ou PATH).

    Attributes:
        tool_name: Nom logique de l'outil recherché.
        searched: Noms essayés dans l'ordre.
    """

    def __init__(
        self, tool_name: str, searched: Sequence[str] = ()
    ) -> None:
        self.tool_name = tool_name
        self.searched: List[str] = list(searched) or [tool_name]
        super().__init__(
            f"Exécutable introuvable pour '{tool_name}' "
            f"(noms essayés : {', '.join(self.searched)})"
        )


class ExecutionTimeoutError(ApplicationError):
    """Exception levée quand une exécution dépasse son délai.

    Le processus enfant est déjà terminé quand l'exception se propage.

    Attributes:
        executable: Exécutable lancé.
        timeout: Délai configuré en secondes.
        command: Ligne de commande complète (si connue).
    """

    def __init__(
        self,
        executable: str,
        timeout: float,
        command: Optional[str] = None,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self.command = command
        message = f"Délai dépassé après {timeout}s : {executable}"
        if command:
            message += f"\nCommande : {command}"
        super().__init__(message)


class ExecutionError(ApplicationError):
    """Exception levée quand un processus ne peut pas être lancé ou échoue.

    Attributes:
        executable: Exécutable concerné.
        arguments: Arguments passés à l'exécutable.
        result: ExecutionResult si le processus a tourné, None sinon.
    """

    def __init__(
        self,
        message: str,
        executable: Optional[str] = None,
        arguments: Sequence[str] = (),
        result=None,
    ) -> None:
        self.executable = executable
        self.arguments = list(arguments)
        self.result = result
        super().__init__(message)


class VersionDetectionError(ApplicationError):
    """Exception levée quand une version exigée est inconnue ou incompatible."""
    pass
