"""Registre des adaptateurs de shell.

Les classes sont indexées par nom de shell et par groupe de plateformes
(``unix``, ``windows``, ``powershell``). Les instances, sans état, sont
créées une seule fois par registre et réutilisées.
"""

import threading
from typing import Dict, List, Optional, Type

from cli_tool_utils.errors.exceptions import UnknownShellError
from cli_tool_utils.shell.base import ShellAdapter
from cli_tool_utils.shell.cmd import CmdAdapter
from cli_tool_utils.shell.posix import (BashAdapter, DashAdapter, FishAdapter,
                                        ShAdapter, ZshAdapter)
from cli_tool_utils.shell.powershell import PowerShellAdapter
from cli_tool_utils.shell.tcsh import TcshAdapter

BUILTIN_ADAPTERS = (
    BashAdapter,
    ZshAdapter,
    FishAdapter,
    ShAdapter,
    DashAdapter,
    TcshAdapter,
    PowerShellAdapter,
    CmdAdapter,
)

# Shells utilisables par plateforme, par ordre de préférence
PLATFORM_SHELLS = {
    "linux": ("bash", "zsh", "fish", "sh", "dash", "tcsh", "powershell"),
    "macos": ("zsh", "bash", "fish", "sh", "dash", "tcsh", "powershell"),
    "windows": ("powershell", "cmd", "bash"),
}


class ShellRegistry:
    """Associe noms de shell et groupes de plateformes aux adaptateurs.

    Thread-safe : l'enregistrement et la création d'instances sont
    protégés par un verrou.
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, Type[ShellAdapter]] = {}
        self._by_group: Dict[str, List[Type[ShellAdapter]]] = {}
        self._instances: Dict[str, ShellAdapter] = {}
        self._lock = threading.Lock()

    @classmethod
    def with_defaults(cls) -> "ShellRegistry":
        """Registre contenant les huit adaptateurs intégrés."""
        registry = cls()
        for adapter_class in BUILTIN_ADAPTERS:
            registry.register(adapter_class)
        return registry

    def register(self, adapter_class: Type[ShellAdapter]) -> None:
        """Enregistre (ou remplace) un adaptateur sous son NAME.

        Raises:
            ValueError: Si la classe ne déclare pas de NAME.
        """
        name = adapter_class.NAME
        if not name:
            raise ValueError(
                f"{adapter_class.__name__} doit définir NAME"
            )
        with self._lock:
            previous = self._by_name.get(name)
            if previous is not None:
                self._by_group[previous.PLATFORM_GROUP].remove(previous)
            self._by_name[name] = adapter_class
            self._by_group.setdefault(adapter_class.PLATFORM_GROUP, []).append(
                adapter_class
            )
            self._instances.pop(name, None)

    def adapter_class(self, name: str) -> Type[ShellAdapter]:
        """Classe d'adaptateur pour un nom de shell.

        Raises:
            UnknownShellError: Si aucun adaptateur n'est enregistré.
        """
        adapter_class = self._by_name.get(str(name).lower())
        if adapter_class is None:
            raise UnknownShellError(
                str(name),
                f"Shell inconnu : {name!r} (enregistrés : "
                f"{', '.join(self.shell_names())})",
            )
        return adapter_class

    def get(self, name: str) -> ShellAdapter:
        """Instance partagée de l'adaptateur d'un shell.

        Raises:
            UnknownShellError: Si aucun adaptateur n'est enregistré.
        """
        key = str(name).lower()
        with self._lock:
            instance = self._instances.get(key)
            if instance is not None:
                return instance
        adapter_class = self.adapter_class(key)
        with self._lock:
            return self._instances.setdefault(key, adapter_class())

    def is_registered(self, name: str) -> bool:
        return str(name).lower() in self._by_name

    def shell_names(self) -> List[str]:
        return list(self._by_name)

    def for_platform_group(self, group: str) -> List[Type[ShellAdapter]]:
        return list(self._by_group.get(group, []))

    def default_for_platform_group(
        self, group: str
    ) -> Optional[Type[ShellAdapter]]:
        adapters = self._by_group.get(group)
        return adapters[0] if adapters else None

    def valid_for_platform(self, platform: str) -> List[str]:
        """Shells enregistrés utilisables sur une plateforme."""
        return [
            name for name in PLATFORM_SHELLS.get(platform, ())
            if name in self._by_name
        ]

    def instance_count(self) -> int:
        with self._lock:
            return len(self._instances)

    def clear_instances(self) -> None:
        with self._lock:
            self._instances.clear()
