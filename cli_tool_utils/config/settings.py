"""Réglages d'exécution et leur résolution.

Les réglages sont fusionnés par priorité croissante :

    1. valeurs par défaut de RunnerSettings ;
    2. section ``[runner]`` d'un fichier TOML ou JSON ;
    3. variables d'environnement ``CLI_TOOL_UTILS_*`` ;
    4. surcharges explicites passées à ``resolve``.

Example:
    Fichier ``cli_tool_utils.toml`` :

        [runner]
        timeout = 30
        shell = "bash"
        headless = true

    Résolution :

        resolver = SettingsResolver("cli_tool_utils.toml")
        settings = resolver.resolve(timeout=10)
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from cli_tool_utils.config.loader import ConfigLoader, FileConfigLoader
from cli_tool_utils.errors.exceptions import ConfigurationError
from cli_tool_utils.shell.detection import PLATFORMS, SHELL_NAMES
from cli_tool_utils.shell.process import DEFAULT_TIMEOUT

ENV_PREFIX = "CLI_TOOL_UTILS_"
RUNNER_SECTION = "runner"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class RunnerSettings:
    """Réglages partagés par un ExecutionContext.

    Attributes:
        timeout: Délai par défaut des commandes, en secondes.
        shell: Shell imposé (None : détection automatique).
        platform: Plateforme imposée (None : détection automatique).
        debug: Active les traces de diagnostic.
        headless: Empêche l'initialisation graphique des outils.
        cache_size: Capacité des caches d'exécutables et de versions.
        cache_ttl: Durée de vie des entrées de cache (None : illimitée).
    """

    timeout: float = DEFAULT_TIMEOUT
    shell: Optional[str] = None
    platform: Optional[str] = None
    debug: bool = False
    headless: bool = False
    cache_size: int = 100
    cache_ttl: Optional[float] = None

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigurationError(
                f"timeout doit être > 0, reçu: {self.timeout}"
            )
        if self.cache_size < 1:
            raise ConfigurationError(
                f"cache_size doit être >= 1, reçu: {self.cache_size}"
            )
        if self.cache_ttl is not None and self.cache_ttl <= 0:
            raise ConfigurationError(
                f"cache_ttl doit être > 0, reçu: {self.cache_ttl}"
            )
        if self.shell is not None:
            shell = self.shell.lower()
            if shell not in SHELL_NAMES:
                raise ConfigurationError(
                    f"Shell non supporté: {self.shell!r}. "
                    f"Valeurs possibles: {', '.join(SHELL_NAMES)}"
                )
            object.__setattr__(self, "shell", shell)
        if self.platform is not None and self.platform not in PLATFORMS:
            raise ConfigurationError(
                f"Plateforme non supportée: {self.platform!r}. "
                f"Valeurs possibles: {', '.join(PLATFORMS)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} : booléen attendu, reçu {value!r}")


def _to_number(name: str, value: Any, kind: type) -> Any:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} : nombre attendu, reçu {value!r}")
    if isinstance(value, str):
        value = value.strip()
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{name} : nombre attendu, reçu {value!r}"
        ) from e


def _to_optional_str(name: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


_COERCERS = {
    "timeout": lambda name, v: _to_number(name, v, float),
    "shell": _to_optional_str,
    "platform": _to_optional_str,
    "debug": _to_bool,
    "headless": _to_bool,
    "cache_size": lambda name, v: _to_number(name, v, int),
    "cache_ttl": lambda name, v: (
        None if v in (None, "") else _to_number(name, v, float)
    ),
}


def coerce_settings(
    values: Mapping[str, Any], origin: str
) -> Dict[str, Any]:
    """Convertit des valeurs brutes (fichier, environnement) en types.

    Args:
        values: Valeurs indexées par nom de réglage.
        origin: Provenance, reprise dans les messages d'erreur.

    Raises:
        ConfigurationError: Clé inconnue ou valeur non convertible.
    """
    coerced: Dict[str, Any] = {}
    for key, value in values.items():
        coercer = _COERCERS.get(key)
        if coercer is None:
            raise ConfigurationError(
                f"Réglage inconnu {key!r} ({origin}). "
                f"Réglages possibles: {', '.join(_COERCERS)}"
            )
        coerced[key] = coercer(f"{origin}:{key}", value)
    return coerced


class SettingsResolver:
    """Résout les RunnerSettings depuis fichier, environnement et surcharges.

    Attributes:
        config_path: Fichier de configuration optionnel.
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
        loader: Optional[ConfigLoader] = None,
        schema: type | None = None,
    ) -> None:
        """Initialise le résolveur.

        Args:
            config_path: Fichier TOML ou JSON contenant ``[runner]``.
            environ: Environnement lu (défaut: os.environ).
            loader: Chargeur injectable (défaut: FileConfigLoader).
            schema: Modèle pydantic optionnel validant le fichier entier
                (voir cli_tool_utils.config.schema).
        """
        self.config_path = Path(config_path) if config_path else None
        self._environ = os.environ if environ is None else environ
        self._loader = loader or FileConfigLoader()
        self._schema = schema

    def file_values(self) -> Dict[str, Any]:
        """Réglages de la section ``[runner]`` du fichier, s'il existe."""
        if self.config_path is None:
            return {}
        data = self._loader.load(self.config_path, self._schema)
        if hasattr(data, "model_dump"):
            data = data.model_dump(exclude_none=True)
        section = data.get(RUNNER_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"[{RUNNER_SECTION}] doit être une table "
                f"dans {self.config_path}"
            )
        return coerce_settings(section, str(self.config_path))

    def environment_values(self) -> Dict[str, Any]:
        """Réglages portés par les variables ``CLI_TOOL_UTILS_*``."""
        raw = {}
        for key in _COERCERS:
            env_name = f"{ENV_PREFIX}{key.upper()}"
            if env_name in self._environ:
                raw[key] = self._environ[env_name]
        return coerce_settings(raw, "environnement")

    def resolve(self, **overrides: Any) -> RunnerSettings:
        """Fusionne toutes les sources et retourne des réglages validés.

        Args:
            **overrides: Valeurs explicites ; None est ignoré.

        Raises:
            ConfigurationError: Si une source contient une valeur invalide.
        """
        settings = RunnerSettings()
        explicit = {k: v for k, v in overrides.items() if v is not None}
        for layer in (
            self.file_values(),
            self.environment_values(),
            coerce_settings(explicit, "surcharge"),
        ):
            if layer:
                settings = replace(settings, **layer)
        return settings
