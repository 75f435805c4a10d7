"""Schéma pydantic du fichier de configuration.

Nécessite l'extra ``validation`` :

    pip install cli-tool-utils[validation]

Example:
    from cli_tool_utils.config import SettingsResolver
    from cli_tool_utils.config.schema import ConfigFileSchema

    resolver = SettingsResolver("outils.toml", schema=ConfigFileSchema)
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cli_tool_utils.shell.detection import SHELL_NAMES


class RunnerSection(BaseModel):
    """Section ``[runner]``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout: Optional[float] = Field(default=None, gt=0)
    shell: Optional[str] = None
    platform: Optional[Literal["macos", "linux", "windows"]] = None
    debug: Optional[bool] = None
    headless: Optional[bool] = None
    cache_size: Optional[int] = Field(default=None, ge=1)
    cache_ttl: Optional[float] = Field(default=None, gt=0)

    @field_validator("shell")
    @classmethod
    def validate_shell(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.lower() not in SHELL_NAMES:
            raise ValueError(
                f"shell inconnu {v!r} (valeurs : {', '.join(SHELL_NAMES)})"
            )
        return v


class ConfigFileSchema(BaseModel):
    """Fichier complet ; les sections autres que ``runner`` sont libres."""

    model_config = ConfigDict(frozen=True, extra="allow")

    runner: RunnerSection = Field(default_factory=RunnerSection)
