"""Modèles liés à la détection de version."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from cli_tool_utils.errors.exceptions import ValidationError

UNKNOWN_VERSION = "unknown"
DEFAULT_VERSION_PATTERN = r"(\d+\.\d+)"


@dataclass(frozen=True)
class VersionDetectionMethod:
    """Une sonde de version.

    Attributes:
        type: ``command`` (lancer l'exécutable) ou ``man_page``.
        command: Arguments de la sonde (ex: ``("--version",)``).
        pattern: Regex dont le premier groupe est la version.
        paths: Chemin de page de manuel par plateforme.
    """

    type: str = "command"
    command: Tuple[str, ...] = ("--version",)
    pattern: str = DEFAULT_VERSION_PATTERN
    paths: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if self.type not in ("command", "man_page"):
            raise ValidationError(
                f"méthode de détection inconnue {self.type!r}",
                constraint="command | man_page",
            )
        command = self.command
        if isinstance(command, str):
            command = (command,)
        object.__setattr__(self, "command", tuple(command))
        paths = self.paths
        if isinstance(paths, Mapping):
            paths = tuple(paths.items())
        object.__setattr__(self, "paths", tuple(paths))

    def path_for(self, platform: str) -> Optional[str]:
        """Chemin de page de manuel pour une plateforme, s'il existe."""
        return dict(self.paths).get(platform)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VersionDetectionMethod":
        return cls(
            type=data.get("type", "command"),
            command=data.get("command") or ("--version",),
            pattern=data.get("pattern") or DEFAULT_VERSION_PATTERN,
            paths=data.get("paths") or (),
        )


@dataclass(frozen=True)
class VersionInfo:
    """Résultat d'une détection de version.

    Attributes:
        value: Version détectée, ou ``unknown``.
        method_used: Type de la méthode ayant réussi (None si aucune).
        available_methods: Types des méthodes essayées, dans l'ordre.
    """

    value: str
    method_used: Optional[str] = None
    available_methods: Tuple[str, ...] = ()

    @property
    def is_known(self) -> bool:
        return self.value != UNKNOWN_VERSION


@dataclass(frozen=True)
class CompatibilityResult:
    """Verdict de VersionCompatibility.check.

    Attributes:
        compatible: True si toutes les contraintes sont satisfaites.
        installed: Version installée testée.
        requirement: Exigence d'origine.
        reason: Explication lisible.
    """

    compatible: bool
    installed: str
    requirement: str
    reason: str

    @property
    def status_message(self) -> str:
        if self.compatible:
            return f"Version {self.installed} compatible"
        return f"Version incompatible : {self.reason}"
