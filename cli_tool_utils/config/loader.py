"""Fonctions de chargement de configuration."""

import json
import tomllib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Union

from cli_tool_utils.errors.exceptions import (ConfigurationError,
                                              FileConfigurationError)


class ConfigLoader(ABC):
    """
    Interface abstraite pour le chargement de configuration.

    Permet l'injection de dépendance et facilite les tests
    en permettant de substituer l'implémentation réelle par un mock.
    """

    @abstractmethod
    def load(
        self,
        config_path: Union[str, Path],
        schema: type | None = None
    ) -> Union[Dict[str, Any], Any]:
        """
        Charge un fichier de configuration.

        Args:
            config_path: Chemin vers le fichier de configuration
            schema: Classe Pydantic BaseModel optionnelle pour
                validation. Si fourni, retourne une instance
                du modèle. Si None, retourne un dict brut.

        Returns:
            Dictionnaire de configuration ou instance du schema

        Raises:
            FileConfigurationError: Fichier absent, illisible ou
                d'extension non supportée
            ConfigurationError: Si la validation par schema échoue
            ImportError: Si schema fourni mais pydantic absent
            TypeError: Si schema n'est pas un BaseModel
        """
        pass


class FileConfigLoader(ConfigLoader):
    """
    Implémentation du chargeur de configuration depuis fichiers.

    Supporte les formats TOML et JSON, détectés automatiquement
    par l'extension du fichier. Supporte optionnellement la
    validation via un modèle Pydantic BaseModel.
    """

    def load(
        self,
        config_path: Union[str, Path],
        schema: type | None = None
    ) -> Union[Dict[str, Any], Any]:
        """
        Charge un fichier de configuration TOML ou JSON.

        Le format est détecté automatiquement par l'extension
        du fichier. Si un schema Pydantic est fourni, le dict
        brut est validé et une instance du modèle est retournée.

        Args:
            config_path: Chemin vers le fichier de configuration
            schema: Classe Pydantic BaseModel optionnelle

        Returns:
            Dictionnaire de configuration ou instance du schema

        Raises:
            FileConfigurationError: Fichier absent, extension non
                supportée ou contenu invalide
            ConfigurationError: Si la validation par schema échoue
            ImportError: Si schema fourni mais pydantic absent
            TypeError: Si schema n'est pas un BaseModel
        """
        path = Path(config_path)

        if not path.exists():
            raise FileConfigurationError(
                f"Fichier de configuration non trouvé: {path}"
            )

        suffix = path.suffix.lower()

        try:
            if suffix == ".toml":
                with open(path, "rb") as f:
                    raw_config = tomllib.load(f)
            elif suffix == ".json":
                with open(path, "r", encoding="utf-8") as f:
                    raw_config = json.load(f)
            else:
                raise FileConfigurationError(
                    f"Extension non supportée: {suffix}. "
                    "Utilisez .toml ou .json"
                )
        except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
            raise FileConfigurationError(
                f"Fichier de configuration invalide {path}: {e}"
            ) from e

        if not isinstance(raw_config, dict):
            raise FileConfigurationError(
                f"La racine de {path} doit être une table"
            )

        if schema is None:
            return raw_config

        return self._validate_with_schema(raw_config, schema)

    @staticmethod
    def _validate_with_schema(
        data: Dict[str, Any], schema: type
    ) -> Any:
        """Valide un dict via un modèle Pydantic.

        Args:
            data: Dictionnaire brut à valider.
            schema: Classe Pydantic BaseModel.

        Returns:
            Instance du modèle validé.

        Raises:
            ImportError: Si pydantic n'est pas installé.
            TypeError: Si schema n'est pas un BaseModel.
            ConfigurationError: Si les données sont refusées.
        """
        try:
            from pydantic import BaseModel
            from pydantic import ValidationError as PydanticValidationError
        except ImportError:
            raise ImportError(
                "pydantic est requis pour la validation "
                "de schema. Installez-le avec: "
                "pip install cli-tool-utils[validation]"
            )

        if not (
            isinstance(schema, type)
            and issubclass(schema, BaseModel)
        ):
            raise TypeError(
                f"Le schema doit être une sous-classe de "
                f"pydantic.BaseModel, reçu: {schema}"
            )

        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Configuration refusée par {schema.__name__}: {e}"
            ) from e
