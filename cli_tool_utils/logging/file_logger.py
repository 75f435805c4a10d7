"""Logger fichier (avec sortie console optionnelle)."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from cli_tool_utils.logging.base import Logger

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class FileLogger(Logger):
    """
    Logger qui écrit dans un fichier avec option console.

    Un logger stdlib distinct est créé par chemin de fichier ; les
    handlers ne sont ajoutés qu'une fois, la propagation est coupée
    et chaque enregistrement est vidé immédiatement sur le disque.
    """

    def __init__(
        self,
        log_file: str,
        config: Optional[Dict[str, Any]] = None,
        console_output: bool = False
    ) -> None:
        """
        Initialise le logger.

        Args:
            log_file: Chemin du fichier de log
            config: Section de configuration optionnelle, clés
                    supportées : ``level`` et ``format``
                    (ex: la table ``[logging]`` d'un fichier TOML)
            console_output: Activer la sortie console en plus du fichier
        """
        self.log_file = log_file
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        config = config or {}
        log_level = getattr(
            logging, str(config.get("level", "INFO")).upper(), logging.INFO
        )
        log_format = config.get("format", DEFAULT_FORMAT)

        self.logger = logging.getLogger(f"cli_tool_utils.file.{log_file}")
        self.logger.setLevel(log_level)

        if not self.logger.handlers:
            formatter = logging.Formatter(log_format)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)
            self.handler = file_handler

            if console_output:
                console_handler = logging.StreamHandler()
                console_handler.setLevel(log_level)
                console_handler.setFormatter(formatter)
                self.logger.addHandler(console_handler)
        else:
            self.handler = self.logger.handlers[0]

        self.logger.propagate = False

    def _flush(self) -> None:
        """Force l'écriture immédiate sur le disque."""
        for handler in self.logger.handlers:
            handler.flush()

    def log_info(self, message: str) -> None:
        self.logger.info(message)
        self._flush()

    def log_warning(self, message: str) -> None:
        self.logger.warning(message)
        self._flush()

    def log_error(self, message: str) -> None:
        self.logger.error(message)
        self._flush()

    def close(self) -> None:
        """Ferme et détache les handlers (utile dans les tests)."""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
