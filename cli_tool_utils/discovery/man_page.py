"""Lecture de la date d'une page de manuel mdoc.

Certains outils BSD n'ont pas d'option ``--version`` : la macro ``.Dd``
de leur page de manuel sert alors de version (``YYYY-MM-DD``).
"""

import re
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

DD_LINE_PATTERN = re.compile(r"^\.Dd\s+(.+)$", re.MULTILINE)

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

# Mois JJ, AAAA | JJ Mois AAAA | AAAA-MM-JJ
_MONTH_FIRST = re.compile(r"([A-Za-z]+)\.?\s+(\d{1,2}),?\s+(\d{4})")
_DAY_FIRST = re.compile(r"(\d{1,2})\s+([A-Za-z]+)\.?,?\s+(\d{4})")
_ISO = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


class ManPageParser:
    """Extrait la date ``.Dd`` d'une page de manuel."""

    def parse_date(self, man_page_path: Optional[str]) -> Optional[str]:
        """Date de la page au format ``YYYY-MM-DD``.

        Args:
            man_page_path: Chemin de la page (non compressée).

        Returns:
            La date, ou None si le fichier est absent, illisible ou sans
            macro ``.Dd`` exploitable.
        """
        if not man_page_path:
            return None
        path = Path(man_page_path)
        if not path.is_file():
            return None
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None
        return self.parse_content(content)

    def parse_content(self, content: str) -> Optional[str]:
        """Comme parse_date, à partir du texte de la page."""
        match = DD_LINE_PATTERN.search(content)
        if not match:
            return None
        parsed = self.parse_date_text(match.group(1).strip())
        return parsed.strftime("%Y-%m-%d") if parsed else None

    @staticmethod
    def parse_date_text(text: str) -> Optional[date]:
        """Interprète le texte d'une macro ``.Dd``.

        ``$Mdocdate: June 5 2019 $`` est accepté comme ``June 5, 2019``.
        """
        text = text.replace("$Mdocdate:", "").replace("$", "").strip()

        match = _ISO.search(text)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return _safe_date(year, month, day)

        match = _MONTH_FIRST.search(text)
        if match:
            month = MONTHS.get(match.group(1).lower())
            if month:
                return _safe_date(int(match.group(3)), month,
                                  int(match.group(2)))

        match = _DAY_FIRST.search(text)
        if match:
            month = MONTHS.get(match.group(2).lower())
            if month:
                return _safe_date(int(match.group(3)), month,
                                  int(match.group(1)))

        return None

    def parse_first(self, paths: Iterable[str]) -> Optional[str]:
        """Première date lisible parmi plusieurs chemins candidats."""
        for path in paths:
            found = self.parse_date(path)
            if found:
                return found
        return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None
