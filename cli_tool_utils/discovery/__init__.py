"""Module de découverte des exécutables et de leur version.

Classes disponibles :
    ExecutableLocator : Résolution alias, motifs de recherche puis PATH.
    PathScanner : Parcours du PATH et de PATHEXT.
    DiscoveryStrategy : Interface des stratégies de découverte.
    AliasDiscovery, SearchPathDiscovery, PathDiscovery : Stratégies
        intégrées.
    VersionDetector : Sondes de version (commande, page de manuel).
    VersionCompatibility : Contrôle d'exigences de version.
    ManPageParser : Date ``.Dd`` d'une page de manuel.
"""

from cli_tool_utils.discovery.locator import (AliasDiscovery,
                                              DiscoveryStrategy,
                                              ExecutableLocator,
                                              PathDiscovery, PathScanner,
                                              SearchPathDiscovery)
from cli_tool_utils.discovery.man_page import ManPageParser
from cli_tool_utils.discovery.version import (VersionCompatibility,
                                              VersionDetector,
                                              compare_versions)

__all__ = [
    "ExecutableLocator",
    "PathScanner",
    "DiscoveryStrategy",
    "AliasDiscovery",
    "PathDiscovery",
    "SearchPathDiscovery",
    "VersionDetector",
    "VersionCompatibility",
    "ManPageParser",
    "compare_versions",
]
