"""Provenance d'un exécutable résolu."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


class ExecutableSource(StrEnum):
    """Origine de la résolution d'un exécutable."""

    PATH = "path"
    ALIAS = "alias"
    SEARCH_PATH = "search_path"


@dataclass(frozen=True)
class ExecutableInfo:
    """Informations sur la découverte d'un exécutable.

    Attributes:
        path: Chemin (ou commande) effectivement lancé.
        source: ``path``, ``alias`` ou ``search_path``.
        shell: Shell dans lequel la recherche a eu lieu.
        alias_definition: Texte de l'alias (source ``alias`` uniquement).
    """

    path: str
    source: ExecutableSource
    shell: str
    alias_definition: Optional[str] = None

    @property
    def is_alias(self) -> bool:
        return self.source == ExecutableSource.ALIAS

    @property
    def description(self) -> str:
        """Explication lisible de la provenance."""
        if self.is_alias:
            return f"Alias du shell {self.shell} : {self.alias_definition}"
        if self.source == ExecutableSource.SEARCH_PATH:
            return f"Trouvé par un chemin de recherche : {self.path}"
        return f"Trouvé dans le PATH : {self.path}"


@dataclass(frozen=True)
class LocatedExecutable:
    """Résultat de ExecutableLocator.find_with_info.

    Attributes:
        path: Chemin à lancer.
        info: Provenance détaillée.
        matched_name: Nom (outil ou alias) ayant permis la résolution.
    """

    path: str
    info: ExecutableInfo
    matched_name: str
