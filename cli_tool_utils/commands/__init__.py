"""Module de construction et d'exécution de commandes.

Classes disponibles :
    CommandExecutor : Interface abstraite pour les exécuteurs.
    CommandArgumentBuilder : Arguments ordonnés depuis une définition.
    ProcessExecutor : Exécuteur concret via un adaptateur de shell.
    CommandFormatter : Interface abstraite de formatage.
    PlainCommandFormatter : Formatage texte brut (logs fichier).
    AnsiCommandFormatter : Formatage ANSI coloré (console).
"""

from cli_tool_utils.commands.base import CommandExecutor
from cli_tool_utils.commands.builder import CommandArgumentBuilder
from cli_tool_utils.commands.formatter import (
    CommandFormatter,
    PlainCommandFormatter,
    AnsiCommandFormatter,
)
from cli_tool_utils.commands.runner import ProcessExecutor

__all__ = [
    # Interface abstraite
    "CommandExecutor",
    # Constructeur
    "CommandArgumentBuilder",
    # Formateurs
    "CommandFormatter",
    "PlainCommandFormatter",
    "AnsiCommandFormatter",
    # Implémentation
    "ProcessExecutor",
]
