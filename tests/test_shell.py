"""Tests pour les adaptateurs de shell (règles de quoting, sans lancement)."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from cli_tool_utils.errors import ExecutionError
from cli_tool_utils.shell import (BashAdapter, CmdAdapter, DashAdapter,
                                  FishAdapter, PowerShellAdapter, ShAdapter,
                                  ShellAdapter, TcshAdapter, ZshAdapter)
from cli_tool_utils.shell.posix import (PosixAdapter, PosixQuoting,
                                        parse_alias_output)

ALL_ADAPTERS = [
    BashAdapter, ZshAdapter, FishAdapter, ShAdapter, DashAdapter,
    TcshAdapter, PowerShellAdapter, CmdAdapter,
]
POSIX_ADAPTERS = [BashAdapter, ZshAdapter, ShAdapter, DashAdapter]


class TestNeedsQuoting:
    """Règles communes de needs_quoting."""

    @pytest.mark.parametrize("adapter_class", ALL_ADAPTERS)
    def test_chaine_vide(self, adapter_class):
        """La chaîne vide doit toujours être quotée."""
        assert adapter_class().needs_quoting("") is True

    @pytest.mark.parametrize("adapter_class", ALL_ADAPTERS)
    def test_mot_simple(self, adapter_class):
        """Un mot alphanumérique n'a pas besoin de quotes."""
        assert adapter_class().needs_quoting("simple") is False

    @pytest.mark.parametrize("adapter_class", ALL_ADAPTERS)
    @pytest.mark.parametrize("value", ["a b", "a\tb", "a;b", "a|b", "*.png",
                                       "a&b", "(x)", 'say"hi', "~", "!"])
    def test_metacaracteres(self, adapter_class, value):
        """Blancs et métacaractères imposent des quotes."""
        assert adapter_class().needs_quoting(value) is True

    @pytest.mark.parametrize("adapter_class", ALL_ADAPTERS)
    def test_adaptateur_est_un_shell_adapter(self, adapter_class):
        """Chaque adaptateur implémente l'interface ShellAdapter."""
        adapter = adapter_class()
        assert isinstance(adapter, ShellAdapter)
        assert adapter.name == adapter_class.NAME


class TestPosixAdapters:
    """Tests pour bash, zsh, sh et dash."""

    @pytest.mark.parametrize("adapter_class", POSIX_ADAPTERS)
    def test_escape_quote_simple(self, adapter_class):
        """Une quote simple devient '\\''."""
        assert adapter_class().escape("it's") == "it'\\''s"

    @pytest.mark.parametrize("adapter_class", POSIX_ADAPTERS)
    def test_quote(self, adapter_class):
        """quote entoure de quotes simples."""
        adapter = adapter_class()
        assert adapter.quote("a b") == "'a b'"
        assert adapter.quote("") == "''"
        assert adapter.quote("it's") == "'it'\\''s'"

    def test_join_quote_chaque_jeton(self):
        """join quote tous les jetons, même ceux qui n'en ont pas besoin."""
        assert BashAdapter().join("magick", "convert", "a.png", "b.png") == (
            "'magick' 'convert' 'a.png' 'b.png'"
        )

    def test_env_var(self):
        assert BashAdapter().env_var("HOME") == "$HOME"

    def test_display_command_est_la_ligne_jointe(self):
        assert BashAdapter().display_command("ls", ["a b"]) == "'ls' 'a b'"

    def test_format_path_identite(self):
        assert ZshAdapter().format_path("/tmp/a b.png") == "/tmp/a b.png"

    def test_headless_linux(self):
        """Sous Linux, seul DISPLAY est vidé."""
        assert BashAdapter().headless_environment("linux") == {"DISPLAY": ""}

    def test_headless_macos(self):
        """Sous macOS, les drapeaux AppleEvents et GDK sont ajoutés."""
        env = ZshAdapter().headless_environment("macos")
        assert env["DISPLAY"] == ""
        assert env["NSAppleEventsSuppressStartupAlert"] == "true"
        assert env["NSUIElement"] == "1"
        assert env["GDK_BACKEND"] == "x11"

    def test_command_argv(self):
        """La ligne est passée à ``<shell> -c``."""
        with patch.object(BashAdapter, "shell_executable",
                          return_value="/bin/bash"):
            argv = BashAdapter().command_argv("ls", ["-l", "a b"])
        assert argv == ["/bin/bash", "-c", "'ls' '-l' 'a b'"]

    def test_shell_absent(self):
        """Un shell introuvable lève ExecutionError."""
        with patch.object(BashAdapter, "shell_executable", return_value=None):
            with pytest.raises(ExecutionError, match="introuvable"):
                BashAdapter().command_argv("ls", [])


class TestFishAndTcsh:
    """Tests des variantes fish et tcsh."""

    def test_fish_double_les_backslashes(self):
        """Dans fish, le backslash est doublé avant les quotes."""
        assert FishAdapter().escape("a\\b'c") == "a\\\\b'\\''c"
        assert FishAdapter().quote("C:\\tmp") == "'C:\\\\tmp'"

    def test_tcsh_protege_l_historique(self):
        """tcsh échappe ``!`` dans les quotes."""
        assert TcshAdapter().quote("hi!") == "'hi\\!'"
        assert TcshAdapter().quote("it's") == "'it'\\''s'"

    def test_tcsh_alias_query(self):
        assert TcshAdapter.alias_query("ll") == "alias 'll'"
        assert BashAdapter.alias_query("ll") == "type 'll'"

    def test_tcsh_parse_alias(self):
        """La sortie de ``alias NAME`` est le corps de l'alias."""
        alias = TcshAdapter.parse_alias("ll", "ls -l\n")
        assert alias.target == "ls"
        assert alias.definition == "ll ls -l"
        assert TcshAdapter.parse_alias("ll", "") is None

    @pytest.mark.parametrize("adapter_class", [FishAdapter, TcshAdapter])
    def test_adaptateur_independant(self, adapter_class):
        """fish et tcsh implémentent ShellAdapter sans hériter de bash."""
        assert ShellAdapter in adapter_class.__bases__
        assert not issubclass(adapter_class, PosixAdapter)
        assert isinstance(adapter_class.QUOTING, PosixQuoting)

    def test_variantes_de_quoting_sans_heritage(self):
        """Les variantes de quoting sont des options, pas des sous-classes."""
        fish = PosixQuoting(double_backslashes=True)
        tcsh = PosixQuoting(escape_history=True)
        assert fish.quote("a\\b!") == "'a\\\\b!'"
        assert tcsh.quote("a\\b!") == "'a\\b\\!'"
        assert PosixQuoting().quote("a\\b!") == "'a\\b!'"

    def test_tcsh_detect_alias(self):
        """tcsh interroge ``alias NAME`` et lit le corps brut."""
        completed = subprocess.CompletedProcess(
            args=[], returncode=0, stdout="ls -l\n", stderr=""
        )
        with patch.object(TcshAdapter, "shell_executable",
                          return_value="/bin/tcsh"), \
                patch("cli_tool_utils.shell.posix.subprocess.run",
                      return_value=completed) as run:
            alias = TcshAdapter.detect_alias("ll")
        assert alias.target == "ls"
        assert run.call_args.args[0] == ["/bin/tcsh", "-c", "alias 'll'"]


class TestAliasParsing:
    """Tests pour parse_alias_output."""

    def test_bash(self):
        alias = parse_alias_output("ll", "ll is aliased to `ls -alF'\n")
        assert alias.target == "ls"
        assert alias.definition == "ll is aliased to `ls -alF'"

    def test_zsh(self):
        alias = parse_alias_output("gs", "gs is an alias for ghostscript -q")
        assert alias.target == "ghostscript"

    def test_fish(self):
        output = (
            "ll is a function with definition\n"
            "# Defined via `source`\n"
            "function ll --wraps=ls --description 'alias ll=ls -lh'\n"
            "    ls -lh $argv\n"
            "end\n"
        )
        assert parse_alias_output("ll", output).target == "ls"

    def test_pas_un_alias(self):
        assert parse_alias_output("ls", "ls is /usr/bin/ls") is None

    def test_autre_nom(self):
        assert parse_alias_output("la", "ll is aliased to `ls -alF'") is None

    def test_detect_alias_via_sonde(self):
        """detect_alias interprète la sortie de la sonde ``type``."""
        completed = subprocess.CompletedProcess(
            args=[], returncode=0, stdout="ll is aliased to `ls -alF'\n",
            stderr="",
        )
        with patch.object(BashAdapter, "shell_executable",
                          return_value="/bin/bash"), \
                patch("cli_tool_utils.shell.posix.subprocess.run",
                      return_value=completed) as mock_run:
            alias = BashAdapter.detect_alias("ll")

        assert alias.target == "ls"
        args = mock_run.call_args.args[0]
        assert args == ["/bin/bash", "-c", "type 'll'"]
        assert mock_run.call_args.kwargs["timeout"] == 5

    def test_detect_alias_code_non_nul(self):
        """Une sonde en échec signifie : pas d'alias."""
        completed = subprocess.CompletedProcess(
            args=[], returncode=1, stdout="", stderr="not found"
        )
        with patch.object(BashAdapter, "shell_executable",
                          return_value="/bin/bash"), \
                patch("cli_tool_utils.shell.posix.subprocess.run",
                      return_value=completed):
            assert BashAdapter.detect_alias("absent") is None

    def test_detect_alias_timeout(self):
        """Une sonde trop longue signifie : pas d'alias."""
        with patch.object(BashAdapter, "shell_executable",
                          return_value="/bin/bash"), \
                patch("cli_tool_utils.shell.posix.subprocess.run",
                      side_effect=subprocess.TimeoutExpired("bash", 5)):
            assert BashAdapter.detect_alias("lent") is None

    def test_windows_sans_alias(self):
        """PowerShell et cmd n'ont pas de notion d'alias."""
        assert PowerShellAdapter.detect_alias("ls") is None
        assert CmdAdapter.detect_alias("dir") is None


class TestPowerShellAdapter:
    """Tests pour PowerShellAdapter."""

    def setup_method(self):
        self.adapter = PowerShellAdapter()

    def test_needs_quoting_tiret_et_dollar(self):
        """Un jeton en ``-`` ou contenant ``$`` doit être quoté."""
        assert self.adapter.needs_quoting("-x") is True
        assert self.adapter.needs_quoting("$HOME") is True
        assert self.adapter.needs_quoting("simple") is False

    def test_escape_quotes_simples(self):
        """Les quotes simples, typographiques comprises, sont doublées."""
        assert self.adapter.escape("it's") == "it''s"
        assert self.adapter.escape("‘x’") == "‘‘x’’"

    def test_escape_for_double_quotes(self):
        """Backtick devant ` $ et \"."""
        assert self.adapter.escape_for_double_quotes('a$b"c`d') == (
            'a`$b`"c``d'
        )

    def test_quote(self):
        assert self.adapter.quote("") == '""'
        assert self.adapter.quote("$env") == '"`$env"'
        assert self.adapter.single_quote("it's") == "'it''s'"

    def test_join_protege_les_parametres_ghostscript(self):
        """``-sDEVICE=pdfwrite`` est quoté pour ne pas perdre le tiret."""
        line = self.adapter.join("gs", "-sDEVICE=pdfwrite", "out file.pdf")
        assert line == 'gs "-sDEVICE=pdfwrite" "out file.pdf"'

    def test_join_command_brut(self):
        """Le jeton suivant -Command n'est pas quoté."""
        line = self.adapter.join("pwsh", "-Command", "Get-Date; exit 2")
        assert line == "pwsh -Command Get-Date; exit 2"

    def test_join_executable_avec_espace(self):
        line = self.adapter.join("C:/Program Files/gs.exe", "a.pdf")
        assert line == '"C:/Program Files/gs.exe" a.pdf'

    def test_env_var(self):
        assert self.adapter.env_var("PATH") == "$ENV:PATH"

    def test_call_script_propage_le_code(self):
        """L'appel propage $LASTEXITCODE et sort avec 127 s'il échoue."""
        script = self.adapter.call_script("/usr/bin/gs", ["-q", "a b"])
        assert script == (
            "$ErrorActionPreference = 'Stop'; "
            "$PSNativeCommandUseErrorActionPreference = $false; "
            "try { & '/usr/bin/gs' '-q' 'a b'; exit $LASTEXITCODE } "
            "catch { [Console]::Error.WriteLine($_); exit 127 }"
        )

    def test_display_command_est_le_script(self):
        """La commande tracée est le script réellement exécuté."""
        assert self.adapter.display_command("gs", ["-v"]) == (
            self.adapter.call_script("gs", ["-v"])
        )

    def test_command_argv(self):
        with patch.object(PowerShellAdapter, "shell_executable",
                          return_value="/usr/bin/pwsh"):
            argv = self.adapter.command_argv("gs", ["-v"])
        assert argv[:5] == [
            "/usr/bin/pwsh", "-NoLogo", "-NoProfile", "-NonInteractive",
            "-Command",
        ]
        assert argv[5] == self.adapter.call_script("gs", ["-v"])
        assert "try { & 'gs' '-v'; exit $LASTEXITCODE }" in argv[5]

    def test_headless_vide(self):
        assert self.adapter.headless_environment("windows") == {}


class TestCmdAdapter:
    """Tests pour CmdAdapter."""

    def setup_method(self):
        self.adapter = CmdAdapter()

    def test_escape_caret(self):
        """``% ^ < > & |`` sont précédés d'un caret."""
        assert self.adapter.escape("a&b|c") == "a^&b^|c"
        assert self.adapter.escape("100%") == "100^%"
        assert self.adapter.escape("<^>") == "^<^^^>"

    def test_quote_seulement_sur_blanc(self):
        assert self.adapter.quote("a b") == '"a b"'
        assert self.adapter.quote("") == '""'
        assert self.adapter.quote("x&y") == "x^&y"

    def test_format_path(self):
        assert self.adapter.format_path("C:/tmp/a.png") == "C:\\tmp\\a.png"

    def test_env_var(self):
        assert self.adapter.env_var("TEMP") == "%TEMP%"

    def test_join_slash_c(self):
        """Après /c, les jetons forment une seule ligne non quotée."""
        line = self.adapter.join("cmd", "/c", "dir", "&&", "echo", "done")
        assert line == "cmd /c dir && echo done"

    def test_join_slash_c_echappe_les_jetons(self):
        """Les opérateurs restent intacts, les autres jetons sont échappés."""
        line = self.adapter.join("cmd", "/C", "echo", "a|b", "|", "sort")
        assert line == "cmd /C echo a^|b | sort"

    def test_join_ordinaire(self):
        line = self.adapter.join("magick", "a b.png", "x&y")
        assert line == 'magick "a b.png" x^&y'

    def test_command_argv_chaine_brute(self):
        """La ligne complète est une chaîne ``/d /s /c``."""
        with patch.object(CmdAdapter, "shell_executable",
                          return_value="C:\\Windows\\System32\\cmd.exe"):
            argv = self.adapter.command_argv("tool", ["x"])
        assert argv == (
            '"C:\\Windows\\System32\\cmd.exe" /d /s /c "tool x"'
        )


class TestExecuteDelegation:
    """execute passe par run_process avec command_argv."""

    def test_execute_utilise_command_argv(self):
        adapter = BashAdapter()
        fake_output = MagicMock()
        with patch.object(BashAdapter, "shell_executable",
                          return_value="/bin/bash"), \
                patch("cli_tool_utils.shell.base.run_process",
                      return_value=fake_output) as mock_run:
            result = adapter.execute("ls", ["-l"], timeout=5)

        assert result is fake_output
        argv, executable = mock_run.call_args.args
        assert argv == ["/bin/bash", "-c", "'ls' '-l'"]
        assert executable == "ls"
        assert mock_run.call_args.kwargs["timeout"] == 5
        assert mock_run.call_args.kwargs["stdin_data"] is None
