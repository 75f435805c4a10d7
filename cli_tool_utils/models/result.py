"""Résultat structuré d'une exécution de commande."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Pattern, Tuple, Union

_LINE_SPLIT = re.compile(r"\r?\n")


def _lines(text: str) -> List[str]:
    if not text:
        return []
    lines = _LINE_SPLIT.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _contains(text: str, pattern: Union[str, Pattern[str]]) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(text) is not None
    return str(pattern) in text


@dataclass(frozen=True)
class ExecutionResult:
    """Résultat immuable d'une exécution.

    Attributes:
        executable: Exécutable lancé.
        command: Ligne de commande complète, formatée pour le shell.
        arguments: Arguments passés à l'exécutable.
        shell: Nom du shell utilisé.
        stdout: Sortie standard brute.
        stderr: Sortie d'erreur brute.
        exit_status: Code de sortie normalisé (128 + signal si tué).
        started_at: Horodatage de lancement.
        finished_at: Horodatage de fin.
        timeout: Délai appliqué en secondes.
    """

    executable: str
    command: str
    arguments: Tuple[str, ...]
    shell: str
    stdout: str
    stderr: str
    exit_status: int
    started_at: datetime
    finished_at: datetime
    timeout: Optional[float] = None

    @property
    def duration(self) -> float:
        """Durée d'exécution en secondes."""
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def success(self) -> bool:
        return self.exit_status == 0

    @property
    def stdout_lines(self) -> List[str]:
        return _lines(self.stdout)

    @property
    def stderr_lines(self) -> List[str]:
        return _lines(self.stderr)

    def stdout_contains(self, pattern: Union[str, Pattern[str]]) -> bool:
        """Teste la présence d'une chaîne ou d'une regex compilée."""
        return _contains(self.stdout, pattern)

    def stderr_contains(self, pattern: Union[str, Pattern[str]]) -> bool:
        return _contains(self.stderr, pattern)

    def formatted_duration(self) -> str:
        """Durée lisible : ``12.5ms``, ``3.2s`` ou ``1m 5.0s``."""
        seconds = self.duration
        if seconds < 1:
            return f"{round(seconds * 1000, 2)}ms"
        if seconds < 60:
            return f"{round(seconds, 2)}s"
        minutes, rest = divmod(seconds, 60)
        return f"{int(minutes)}m {round(rest, 1)}s"

    def to_dict(self) -> Dict[str, Any]:
        """Sérialise le résultat en dictionnaire (horodatages ISO 8601)."""
        return {
            "executable": self.executable,
            "command": self.command,
            "arguments": list(self.arguments),
            "shell": self.shell,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exit_status": self.exit_status,
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration": self.duration,
            "timeout": self.timeout,
        }

    def __str__(self) -> str:
        if self.success:
            return f"Succès : {self.command} ({self.formatted_duration()})"
        return (
            f"Échec : {self.command} (code {self.exit_status}, "
            f"{self.formatted_duration()})"
        )
