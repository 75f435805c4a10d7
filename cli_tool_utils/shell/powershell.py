"""Adaptateur PowerShell (pwsh ou Windows PowerShell).

Deux contextes d'échappement, une fonction chacun :
    - escape : contexte entre quotes simples (quote doublée), utilisé
      pour le script passé à l'opérateur d'appel ``&`` ;
    - escape_for_double_quotes : backtick devant `` ` $ " ``, utilisé
      par quote et join.

Le binder de paramètres de PowerShell retire le ``-`` initial d'un jeton
non quoté qui ressemble à un paramètre (``-sDEVICE=pdfwrite`` devient
``=pdfwrite``) : needs_quoting est donc vrai pour tout jeton commençant
par ``-`` ou contenant ``$``.

Les guillemets doubles et les arguments vides ne traversent intacts
l'opérateur ``&`` qu'avec pwsh 7.3 et plus (passage d'arguments
``Standard`` ou ``Windows``) ; Windows PowerShell 5.1 les altère.
"""

import re
from typing import List, Sequence

from cli_tool_utils.shell.base import ShellAdapter

_DOUBLE_QUOTE_SPECIALS = re.compile(r"([`$\"])")
# PowerShell accepte aussi les quotes typographiques comme quotes simples
_SINGLE_QUOTES = re.compile("(['‘’‚‛])")
_SCRIPT_PARAMETERS = {"-command", "-file"}
NOT_FOUND_STATUS = 127


class PowerShellAdapter(ShellAdapter):
    """Lance ``& '<exe>' '<arg>'...; exit $LASTEXITCODE``.

    Le ``exit $LASTEXITCODE`` final propage le code de sortie de
    l'enfant au lieu de celui du processus PowerShell ; un lancement
    impossible sort avec 127.
    """

    NAME = "powershell"
    PLATFORM_GROUP = "powershell"
    EXECUTABLES = ("pwsh", "powershell")

    def escape(self, value: str) -> str:
        return _SINGLE_QUOTES.sub(r"\1\1", str(value))

    def escape_for_double_quotes(self, value: str) -> str:
        return _DOUBLE_QUOTE_SPECIALS.sub(r"`\1", str(value))

    def quote(self, value: str) -> str:
        return f'"{self.escape_for_double_quotes(value)}"'

    def single_quote(self, value: str) -> str:
        return f"'{self.escape(value)}'"

    def needs_quoting(self, value: str) -> bool:
        text = str(value)
        if super().needs_quoting(text):
            return True
        return text.startswith("-") or "$" in text

    def env_var(self, name: str) -> str:
        return f"$ENV:{name}"

    def join(self, executable: str, *args: str) -> str:
        """Quote seulement les jetons qui en ont besoin.

        ``-Command`` / ``-File`` et le jeton qui les suit restent tels
        quels : PowerShell analyse ce dernier comme un script.
        """
        parts = [self.quote(executable) if self.needs_quoting(executable)
                 else executable]
        raw_next = False
        for arg in args:
            if raw_next:
                parts.append(arg)
                raw_next = False
            elif arg.lower() in _SCRIPT_PARAMETERS:
                parts.append(arg)
                raw_next = True
            elif self.needs_quoting(arg):
                parts.append(self.quote(arg))
            else:
                parts.append(arg)
        return " ".join(parts)

    def call_script(self, executable: str, args: Sequence[str]) -> str:
        """Script ``-Command`` invoquant l'exécutable via l'opérateur ``&``.

        Un échec de l'appel lui-même (commande introuvable, accès refusé)
        n'est pas une erreur bloquante par défaut : ``$LASTEXITCODE``
        resterait ``$null`` et ``exit $null`` vaudrait 0. Le script passe
        donc en ``Stop`` et sort avec 127, comme un shell POSIX.
        """
        tokens = " ".join(self.single_quote(t) for t in (executable, *args))
        return (
            "$ErrorActionPreference = 'Stop'; "
            "$PSNativeCommandUseErrorActionPreference = $false; "
            f"try {{ & {tokens}; exit $LASTEXITCODE }} "
            "catch { [Console]::Error.WriteLine($_); "
            f"exit {NOT_FOUND_STATUS} }}"
        )

    def display_command(self, executable: str, args: Sequence[str]) -> str:
        return self.call_script(executable, args)

    def command_argv(self, executable: str, args: Sequence[str]) -> List[str]:
        shell = self._require_shell_executable(executable)
        return [
            shell, "-NoLogo", "-NoProfile", "-NonInteractive",
            "-Command", self.call_script(executable, args),
        ]
