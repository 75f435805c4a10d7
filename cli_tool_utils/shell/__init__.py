"""Adaptateurs de shell : quoting, échappement et lancement par dialecte."""

from cli_tool_utils.shell.base import AliasInfo, ShellAdapter
from cli_tool_utils.shell.cmd import CmdAdapter
from cli_tool_utils.shell.detection import (PLATFORMS, SHELL_NAMES,
                                            detect_platform, detect_shell)
from cli_tool_utils.shell.posix import (BashAdapter, DashAdapter, FishAdapter,
                                        PosixQuoting, ShAdapter, ZshAdapter)
from cli_tool_utils.shell.powershell import PowerShellAdapter
from cli_tool_utils.shell.process import (DEFAULT_TIMEOUT, ProcessOutput,
                                          normalize_status, run_process)
from cli_tool_utils.shell.registry import ShellRegistry
from cli_tool_utils.shell.tcsh import TcshAdapter

__all__ = [
    "AliasInfo",
    "ShellAdapter",
    "PosixQuoting",
    "BashAdapter",
    "ZshAdapter",
    "FishAdapter",
    "ShAdapter",
    "DashAdapter",
    "TcshAdapter",
    "PowerShellAdapter",
    "CmdAdapter",
    "ShellRegistry",
    "PLATFORMS",
    "SHELL_NAMES",
    "detect_platform",
    "detect_shell",
    "DEFAULT_TIMEOUT",
    "ProcessOutput",
    "normalize_status",
    "run_process",
]
