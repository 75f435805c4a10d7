"""Tests pour le module discovery (localisation et versions)."""

import os
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from cli_tool_utils.cache import TTLCache
from cli_tool_utils.commands import ProcessExecutor
from cli_tool_utils.discovery import (AliasDiscovery, DiscoveryStrategy,
                                      ExecutableLocator, ManPageParser,
                                      PathDiscovery, PathScanner,
                                      SearchPathDiscovery,
                                      VersionCompatibility, VersionDetector,
                                      compare_versions)
from cli_tool_utils.errors import (ExecutableNotFoundError,
                                   ExecutionTimeoutError, ValidationError)
from cli_tool_utils.logging.base import Logger
from cli_tool_utils.models import (ExecutionResult, ExecutableSource,
                                   VersionDetectionMethod)
from cli_tool_utils.shell import AliasInfo, ShellAdapter

posix_only = pytest.mark.skipif(
    os.name != "posix", reason="bits d'exécution POSIX requis"
)


def make_executable(directory, name):
    """Crée un script exécutable dans directory."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)
    return str(path)


def make_shell(alias=None):
    """Adaptateur simulé ; detect_alias retourne alias."""
    shell = MagicMock(spec=ShellAdapter)
    shell.name = "bash"
    shell.detect_alias.return_value = alias
    return shell


def make_result(stdout="", stderr="", exit_status=0):
    started = datetime(2024, 5, 1, 12, 0, 0)
    return ExecutionResult(
        executable="/usr/bin/tool",
        command="'/usr/bin/tool' '--version'",
        arguments=("--version",),
        shell="bash",
        stdout=stdout,
        stderr=stderr,
        exit_status=exit_status,
        started_at=started,
        finished_at=started,
        timeout=30,
    )


# --- Tests PathScanner ---


class TestPathScanner:
    """Tests pour PathScanner."""

    def test_search_paths_sans_doublons(self):
        scanner = PathScanner("linux", {"PATH": "/a::/b:/a"})
        assert scanner.search_paths() == ["/a", "/b"]

    @posix_only
    def test_find_by_pattern(self, tmp_path):
        """Les motifs sont essayés dans l'ordre ; les dossiers sont ignorés."""
        (tmp_path / "gs" / "1.0" / "bin" / "gs").mkdir(parents=True)
        expected = make_executable(tmp_path / "gs" / "10.02" / "bin", "gs")
        patterns = [
            str(tmp_path / "absent" / "*"),
            str(tmp_path / "gs" / "*" / "bin" / "gs"),
        ]

        scanner = PathScanner("linux", {"PATH": ""}, patterns=patterns)

        assert scanner.find_by_pattern() == expected
        assert PathScanner("linux", {}).find_by_pattern() is None

    def test_separateur_windows(self):
        scanner = PathScanner("windows", {"PATH": "C:\\bin;D:\\tools"})
        assert scanner.separator == ";"
        assert scanner.search_paths() == ["C:\\bin", "D:\\tools"]

    def test_extensions(self):
        """Pas de suffixe hors Windows ; .exe en tête sous Windows."""
        assert PathScanner("linux", {}).extensions() == [""]
        scanner = PathScanner("windows", {"PATHEXT": ".BAT;.EXE;.CMD"})
        assert scanner.extensions() == [".EXE", ".BAT", ".CMD"]
        assert PathScanner("windows", {}).extensions() == [
            ".EXE", ".COM", ".BAT", ".CMD"
        ]

    @posix_only
    def test_find_dans_le_path(self, tmp_path):
        first = make_executable(tmp_path / "a", "magick")
        make_executable(tmp_path / "b", "magick")
        path_var = f"{tmp_path / 'a'}:{tmp_path / 'b'}"

        scanner = PathScanner("linux", {"PATH": path_var})

        assert scanner.find("magick") == first
        assert scanner.find("absent") is None
        assert scanner.find("") is None

    @posix_only
    def test_fichier_non_executable_ignore(self, tmp_path):
        (tmp_path / "gs").write_text("pas exécutable")
        (tmp_path / "gs").chmod(0o644)

        scanner = PathScanner("linux", {"PATH": str(tmp_path)})

        assert scanner.find("gs") is None

    @posix_only
    def test_chemin_explicite(self, tmp_path):
        path = make_executable(tmp_path, "tool")
        scanner = PathScanner("linux", {"PATH": ""})

        assert scanner.find(path) == path
        assert scanner.find(str(tmp_path / "absent")) is None

    @posix_only
    def test_find_windows_pathext(self, tmp_path):
        """Sous Windows, le nom est complété par les extensions."""
        expected = make_executable(tmp_path, "gswin64c.EXE")
        scanner = PathScanner(
            "windows", {"PATH": str(tmp_path), "PATHEXT": ".BAT;.EXE"}
        )

        assert scanner.find("gswin64c") == str(tmp_path / "gswin64c.EXE")
        assert scanner.find("gswin64c.EXE") == expected


# --- Tests des stratégies ---


class TestDiscoveryStrategies:
    """Tests pour AliasDiscovery et PathDiscovery."""

    @posix_only
    def test_path_discovery(self, tmp_path):
        path = make_executable(tmp_path, "gs")
        scanner = PathScanner("linux", {"PATH": str(tmp_path)})

        located = PathDiscovery().discover("gs", make_shell(), scanner)

        assert isinstance(PathDiscovery(), DiscoveryStrategy)
        assert located.path == path
        assert located.info.source is ExecutableSource.PATH
        assert located.info.shell == "bash"
        assert located.matched_name == "gs"

    @posix_only
    def test_alias_discovery(self, tmp_path):
        """La cible de l'alias est cherchée dans le PATH."""
        target = make_executable(tmp_path, "magick")
        scanner = PathScanner("linux", {"PATH": str(tmp_path)})
        alias = AliasInfo("convert is aliased to `magick'", "magick")

        located = AliasDiscovery().discover(
            "convert", make_shell(alias), scanner
        )

        assert located.path == target
        assert located.info.is_alias
        assert located.info.alias_definition == (
            "convert is aliased to `magick'"
        )
        assert located.matched_name == "convert"

    @posix_only
    def test_search_path_discovery(self, tmp_path):
        path = make_executable(tmp_path / "opt", "gswin64c")
        scanner = PathScanner(
            "linux", {"PATH": ""}, patterns=[str(tmp_path / "opt" / "gs*")]
        )

        located = SearchPathDiscovery().discover("gs", make_shell(), scanner)

        assert located.path == path
        assert located.info.source is ExecutableSource.SEARCH_PATH
        assert located.matched_name == "gs"

    def test_alias_absent(self, tmp_path):
        scanner = PathScanner("linux", {"PATH": str(tmp_path)})
        assert AliasDiscovery().discover("gs", make_shell(), scanner) is None

    def test_alias_cible_introuvable(self, tmp_path):
        """Un alias vers un binaire absent n'est pas retenu."""
        scanner = PathScanner("linux", {"PATH": str(tmp_path)})
        alias = AliasInfo("gs is an alias for nowhere", "nowhere")
        assert AliasDiscovery().discover(
            "gs", make_shell(alias), scanner
        ) is None


# --- Tests ExecutableLocator ---


class TestExecutableLocator:
    """Tests pour ExecutableLocator."""

    def setup_method(self):
        self.mock_logger = MagicMock(spec=Logger)

    def make_locator(self, bin_dir, cache=None, **kwargs):
        return ExecutableLocator(
            make_shell(),
            platform="linux",
            cache=cache,
            logger=self.mock_logger,
            environ={"PATH": str(bin_dir)},
            **kwargs,
        )

    @posix_only
    def test_nom_principal(self, tmp_path):
        path = make_executable(tmp_path, "magick")
        locator = self.make_locator(tmp_path)

        located = locator.find_with_info("magick", aliases=["convert"])

        assert located.path == path
        assert located.matched_name == "magick"
        self.mock_logger.log_info.assert_called_once_with(
            f"magick : Trouvé dans le PATH : {path}"
        )

    @posix_only
    def test_repli_sur_alias(self, tmp_path):
        """Les alias sont essayés après le nom principal."""
        path = make_executable(tmp_path, "convert")
        locator = self.make_locator(tmp_path)

        located = locator.find_with_info("magick", aliases=["convert"])

        assert located.path == path
        assert located.matched_name == "convert"
        assert locator.find("magick", aliases=["convert"]) == path

    def test_introuvable(self, tmp_path):
        locator = self.make_locator(tmp_path)

        assert locator.find("gs") is None
        with pytest.raises(ExecutableNotFoundError) as exc:
            locator.require("gs", aliases=["gswin64c"])

        assert exc.value.tool_name == "gs"
        assert exc.value.searched == ["gs", "gswin64c"]
        self.mock_logger.log_error.assert_called_once_with(
            "Exécutable introuvable : gs"
        )

    @posix_only
    def test_cache(self, tmp_path):
        """Un résultat trouvé est servi par le cache."""
        make_executable(tmp_path, "gs")
        locator = self.make_locator(tmp_path, cache=TTLCache())

        first = locator.require("gs")
        os.remove(first.path)
        second = locator.require("gs")

        assert second is first
        assert locator.cache_stats()["hits"] == 1

    @posix_only
    def test_absence_non_mise_en_cache(self, tmp_path):
        """Un outil installé après un échec est trouvé."""
        locator = self.make_locator(tmp_path, cache=TTLCache())

        assert locator.find("gs") is None
        make_executable(tmp_path, "gs")
        assert locator.find("gs") is not None

    @posix_only
    def test_cle_de_cache_par_version(self, tmp_path):
        make_executable(tmp_path, "gs")
        cache = TTLCache()
        locator = self.make_locator(tmp_path, cache=cache)

        locator.find_with_info("gs", version="9.5")
        locator.find_with_info("gs", version="10.0")

        assert len(cache.keys()) == 2

    @posix_only
    def test_search_paths_avant_le_path(self, tmp_path):
        """Les motifs de la plateforme passent avant le PATH."""
        make_executable(tmp_path / "bin", "gs")
        custom = make_executable(tmp_path / "opt" / "gs-10", "gs")
        search_paths = {
            "linux": [str(tmp_path / "opt" / "gs-*" / "gs")],
            "windows": ["C:/Program Files/gs/*/bin/gswin64c.exe"],
        }
        locator = self.make_locator(tmp_path / "bin")

        located = locator.require("gs", search_paths=search_paths)

        assert located.path == custom
        assert located.info.description == (
            f"Trouvé par un chemin de recherche : {custom}"
        )

    @posix_only
    def test_search_paths_autre_plateforme(self, tmp_path):
        """Seuls les motifs de la plateforme courante sont essayés."""
        path = make_executable(tmp_path / "bin", "gs")
        make_executable(tmp_path / "opt", "gs")
        locator = self.make_locator(tmp_path / "bin")

        located = locator.find_with_info(
            "gs", search_paths={"macos": [str(tmp_path / "opt" / "gs")]}
        )

        assert located.path == path
        assert located.info.source is ExecutableSource.PATH

    @posix_only
    def test_cle_de_cache_par_search_paths(self, tmp_path):
        make_executable(tmp_path, "gs")
        cache = TTLCache()
        locator = self.make_locator(tmp_path, cache=cache)

        locator.find_with_info("gs")
        locator.find_with_info("gs", search_paths={"linux": ["/opt/gs"]})

        assert len(cache.keys()) == 2

    def test_sans_cache(self, tmp_path):
        assert self.make_locator(tmp_path).cache_stats() == {}

    def test_strategies_personnalisees(self, tmp_path):
        """Les stratégies sont consultées dans l'ordre fourni."""
        strategy = MagicMock(spec=DiscoveryStrategy)
        strategy.discover.return_value = None
        locator = self.make_locator(tmp_path, strategies=[strategy])

        assert locator.find("gs", aliases=["ghostscript"]) is None
        names = [c.args[0] for c in strategy.discover.call_args_list]
        assert names == ["gs", "ghostscript"]


# --- Tests de comparaison et compatibilité ---


class TestCompareVersions:
    """Tests pour compare_versions."""

    def test_composantes_numeriques(self):
        assert compare_versions("10.0", "9.5") > 0
        assert compare_versions("1.9", "1.10") < 0

    def test_completion_par_zeros(self):
        assert compare_versions("1.2", "1.2.0") == 0

    def test_suffixes(self):
        """Seuls les chiffres de tête d'une composante comptent."""
        assert compare_versions("7.1.1-15", "7.1.1") == 0
        assert compare_versions("abc", "0") == 0


class TestVersionCompatibility:
    """Tests pour VersionCompatibility."""

    def test_parse(self):
        assert VersionCompatibility.parse(">= 7.0, < 8") == [
            (">=", "7.0"), ("<", "8")
        ]
        assert VersionCompatibility.parse("7.1") == [("==", "7.1")]

    def test_operateur_inconnu(self):
        with pytest.raises(ValidationError, match="opérateur"):
            VersionCompatibility.parse("=> 1.0")

    @pytest.mark.parametrize("installed,operator,version,expected", [
        ("7.1", ">=", "7.0", True),
        ("7.0", ">", "7.0", False),
        ("6.9", "<=", "7.0", True),
        ("7.0", "=", "7.0.0", True),
        ("7.0", "!=", "7.0", False),
        ("2.5.9", "~>", "2.5.0", True),
        ("2.6.0", "~>", "2.5.0", False),
        ("2.9", "~>", "2.1", True),
        ("3.0", "~>", "2.1", False),
        ("2.0", "~>", "2.1", False),
        ("1.2.3.9", "~>", "1.2.3.4", True),
        ("1.2.4", "~>", "1.2.3.4", False),
        ("1.2.9", "~>", "1.2.3.4", False),
        ("4.7", "~>", "4", True),
        ("5.0", "~>", "4", False),
    ])
    def test_satisfies(self, installed, operator, version, expected):
        assert VersionCompatibility.satisfies(
            installed, operator, version
        ) is expected

    def test_compatible(self):
        result = VersionCompatibility.check("7.1.1", ">= 7.0, < 8")
        assert result.compatible
        assert result.reason == "La version 7.1.1 respecte >= 7.0, < 8"
        assert result.status_message == "Version 7.1.1 compatible"

    def test_incompatible(self):
        result = VersionCompatibility.check("6.9", ">= 7.0")
        assert not result.compatible
        assert result.reason == (
            "La version 6.9 ne respecte pas >= 7.0 (exigence : >= 7.0)"
        )
        assert result.status_message.startswith("Version incompatible")

    def test_exigence_vide(self):
        result = VersionCompatibility.check("1.0", None)
        assert result.compatible
        assert result.reason == "Aucune exigence"

    def test_version_inconnue(self):
        result = VersionCompatibility.check("unknown", ">= 1")
        assert not result.compatible
        assert result.reason.startswith("Version installée inconnue")


# --- Tests ManPageParser ---


class TestManPageParser:
    """Tests pour ManPageParser."""

    def setup_method(self):
        self.parser = ManPageParser()

    @pytest.mark.parametrize("line,expected", [
        (".Dd $Mdocdate: June 5 2019 $", "2019-06-05"),
        (".Dd March 12, 2021", "2021-03-12"),
        (".Dd Sept. 3, 2018", "2018-09-03"),
        (".Dd 5 March 2021", "2021-03-05"),
        (".Dd 2020-01-31", "2020-01-31"),
    ])
    def test_formats(self, line, expected):
        content = f'.\\" commentaire\n{line}\n.Dt TAR 1\n'
        assert self.parser.parse_content(content) == expected

    def test_date_invalide(self):
        assert self.parser.parse_content(".Dd February 30, 2020\n") is None
        assert self.parser.parse_content(".Dd un jour\n") is None
        assert self.parser.parse_content(".TH TAR 1\n") is None

    def test_parse_date_fichier(self, tmp_path):
        page = tmp_path / "tar.1"
        page.write_text(".Dd May 20, 2023\n.Dt TAR 1\n")

        assert self.parser.parse_date(str(page)) == "2023-05-20"
        assert self.parser.parse_date(str(tmp_path / "absent.1")) is None
        assert self.parser.parse_date(None) is None

    def test_parse_first(self, tmp_path):
        page = tmp_path / "bsdtar.1"
        page.write_text(".Dd October 1, 2017\n")

        found = self.parser.parse_first(
            [str(tmp_path / "absent.1"), str(page)]
        )
        assert found == "2017-10-01"


# --- Tests VersionDetector ---


class TestVersionDetector:
    """Tests pour VersionDetector avec un exécuteur simulé."""

    def setup_method(self):
        self.executor = MagicMock(spec=ProcessExecutor)
        self.mock_logger = MagicMock(spec=Logger)
        self.shell = make_shell()
        self.detector = VersionDetector(
            self.shell, executor=self.executor, platform="linux",
            logger=self.mock_logger,
        )

    def test_detect_stdout(self):
        self.executor.run.return_value = make_result(
            stdout="Version: ImageMagick 7.1.1-15 Q16-HDRI x86_64"
        )

        version = self.detector.detect(
            "/usr/bin/magick", pattern=r"(\d+\.\d+\.\d+)"
        )

        assert version == "7.1.1"
        args, kwargs = self.executor.run.call_args
        assert args == ("/usr/bin/magick", ["--version"], self.shell)
        assert kwargs["allow_failure"] is True
        assert kwargs["timeout"] == 30

    def test_detect_stderr(self):
        """La version est cherchée dans stderr si stdout est muet."""
        self.executor.run.return_value = make_result(stderr="gs 9.56.1")
        assert self.detector.detect("/usr/bin/gs") == "9.56"

    def test_detect_code_non_nul(self):
        self.executor.run.return_value = make_result(
            stdout="1.2", exit_status=1
        )
        assert self.detector.detect("/usr/bin/tool") == "unknown"

    def test_detect_sans_correspondance(self):
        self.executor.run.return_value = make_result(stdout="no version")
        assert self.detector.detect("/usr/bin/tool") == "unknown"

    def test_detect_timeout(self):
        """Une sonde qui dépasse son délai donne unknown."""
        self.executor.run.side_effect = ExecutionTimeoutError("tool", 30)
        assert self.detector.detect("/usr/bin/tool") == "unknown"

    def test_detect_executable_vide(self):
        assert self.detector.detect("") == "unknown"
        self.executor.run.assert_not_called()

    def test_detect_sortie_man(self):
        """Pour man, la recherche porte sur la fin de la sortie."""
        self.executor.run.return_value = make_result(
            stdout="x" * 2000 + "\nBSD 3.4 June 2019\n"
        )
        version = self.detector.detect("/usr/bin/man", command=["tar"],
                                       source="man")
        assert version == "3.4"
        assert self.executor.run.call_args.args[1] == ["tar"]

    def test_detect_with_methods_commande(self):
        self.executor.run.return_value = make_result(stdout="tool 2.1")
        methods = [VersionDetectionMethod(command=("-V",))]

        info = self.detector.detect_with_methods("/usr/bin/tool", methods)

        assert info.value == "2.1"
        assert info.method_used == "command"
        assert info.available_methods == ("command",)
        assert self.executor.run.call_args.args[1] == ["-V"]

    def test_detect_with_methods_repli_man_page(self, tmp_path):
        """Une sonde en échec passe la main à la page de manuel."""
        page = tmp_path / "tar.1"
        page.write_text(".Dd $Mdocdate: June 5 2019 $\n")
        self.executor.run.return_value = make_result(stdout="usage: tar")
        methods = [
            VersionDetectionMethod(),
            VersionDetectionMethod(
                type="man_page", paths={"linux": str(page)}
            ),
        ]

        info = self.detector.detect_with_methods("/usr/bin/tar", methods)

        assert info.value == "2019-06-05"
        assert info.method_used == "man_page"
        assert info.available_methods == ("command", "man_page")

    def test_detect_with_methods_echec(self):
        self.executor.run.return_value = make_result(exit_status=2)

        info = self.detector.detect_with_methods(
            "/usr/bin/tool", [VersionDetectionMethod()]
        )

        assert not info.is_known
        assert info.method_used is None
        self.mock_logger.log_warning.assert_called_once()
