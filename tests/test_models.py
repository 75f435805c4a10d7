"""Tests pour le module models."""

import re
from datetime import datetime, timedelta

import pytest

from cli_tool_utils.errors import ValidationError
from cli_tool_utils.models import (ArgumentDefinition, CommandDefinition,
                                   EnvVarDefinition, ExecutableInfo,
                                   ExecutableSource, ExecutionResult,
                                   FlagDefinition, FormatStyle,
                                   OptionDefinition, VersionDetectionMethod,
                                   VersionInfo)


def make_result(**overrides):
    """Construit un ExecutionResult de test."""
    started = datetime(2024, 5, 1, 12, 0, 0)
    values = dict(
        executable="/usr/bin/magick",
        command="'/usr/bin/magick' 'a.png' 'b.jpg'",
        arguments=("a.png", "b.jpg"),
        shell="bash",
        stdout="ligne 1\r\nligne 2\n",
        stderr="",
        exit_status=0,
        started_at=started,
        finished_at=started + timedelta(milliseconds=250),
        timeout=90,
    )
    values.update(overrides)
    return ExecutionResult(**values)


class TestOptionDefinition:
    """Tests pour OptionDefinition."""

    def test_valeurs_par_defaut(self):
        """Les valeurs par défaut sont appliquées."""
        option = OptionDefinition(name="density", cli="-density")
        assert option.type == "string"
        assert option.format is FormatStyle.SINGLE_DASH_SPACE
        assert option.separator == "="
        assert option.platforms == ()

    def test_format_depuis_chaine(self):
        """Le format est converti en FormatStyle."""
        option = OptionDefinition(
            name="out", cli="--output", format="double_dash_equals"
        )
        assert option.format is FormatStyle.DOUBLE_DASH_EQUALS
        assert option.format.is_equals

    def test_format_inconnu(self):
        """Un format inconnu est refusé."""
        with pytest.raises(ValidationError, match="format inconnu"):
            OptionDefinition(name="x", cli="-x", format="triple_dash")

    def test_type_inconnu(self):
        """Un type inconnu est refusé."""
        with pytest.raises(ValidationError):
            OptionDefinition(name="x", cli="-x", type="decimal")

    def test_from_dict(self):
        """Construction depuis un mapping de profil."""
        option = OptionDefinition.from_dict({
            "name": "resize",
            "cli": "-resize",
            "platforms": ["linux", "macos"],
            "range": [1, 10],
        })
        assert option.platforms == ("linux", "macos")
        assert option.range == (1, 10)
        assert option.applies_to("linux")
        assert not option.applies_to("windows")
        assert option.applies_to(None)


class TestFlagDefinition:
    """Tests pour FlagDefinition."""

    def test_position_constraint_invalide(self):
        """Seuls first et last sont acceptés."""
        with pytest.raises(ValidationError):
            FlagDefinition(name="v", cli="-v", position_constraint="middle")

    def test_from_dict(self):
        """Construction depuis un mapping."""
        flag = FlagDefinition.from_dict({
            "name": "verbose",
            "cli": "--verbose",
            "default": True,
            "conflicts_with": "quiet",
        })
        assert flag.default is True
        assert flag.conflicts_with == ("quiet",)


class TestArgumentDefinition:
    """Tests pour ArgumentDefinition."""

    def test_position_numerique_depuis_chaine(self):
        """Une position ``"2"`` devient 2."""
        assert ArgumentDefinition(name="a", position="2").position == 2

    def test_position_invalide_devient_defaut(self):
        """Une position illisible vaut 99."""
        arg = ArgumentDefinition(name="a", position="milieu")
        assert arg.position == 99
        assert arg.numeric_position == 99

    def test_positions_symboliques(self):
        """first vaut 1 et last vaut 999."""
        assert ArgumentDefinition(name="a", position="first").numeric_position == 1
        last = ArgumentDefinition(name="b", position="last")
        assert last.is_last
        assert last.numeric_position == 999

    def test_element_type(self):
        """Le type des éléments d'un tableau vient de ``of``."""
        def element_type(**kwargs):
            return ArgumentDefinition(name="a", **kwargs).element_type

        assert element_type(type="array", of="file") == "file"
        assert element_type(type="array") == "string"
        assert element_type(type="integer") == "integer"


class TestCommandDefinition:
    """Tests pour CommandDefinition."""

    def test_plusieurs_last_refuses(self):
        """Au plus un argument peut être ``last``."""
        with pytest.raises(ValidationError, match="plusieurs arguments"):
            CommandDefinition(
                name="cp",
                arguments=(
                    ArgumentDefinition(name="a", position="last"),
                    ArgumentDefinition(name="b", position="last"),
                ),
            )

    def test_regular_arguments_tries_stable(self):
        """Les positionnels sont triés par rang, à égalité dans l'ordre déclaré."""
        command = CommandDefinition(
            name="cmd",
            arguments=(
                ArgumentDefinition(name="c", position=3),
                ArgumentDefinition(name="z", position="last"),
                ArgumentDefinition(name="a"),
                ArgumentDefinition(name="b"),
                ArgumentDefinition(name="f", position="first"),
            ),
        )
        names = [arg.name for arg in command.regular_arguments]
        assert names == ["f", "c", "a", "b"]
        assert command.last_argument.name == "z"

    def test_from_dict(self):
        """Les enregistrements imbriqués sont typés."""
        command = CommandDefinition.from_dict({
            "name": "convert",
            "subcommand": "convert",
            "options": [{"name": "resize", "cli": "-resize"}],
            "flags": [{"name": "strip", "cli": "-strip"}],
            "arguments": [
                {"name": "inputs", "variadic": True, "type": "file"},
                {"name": "output", "position": "last", "type": "file"},
            ],
            "env_vars": [{"name": "MAGICK_THREAD_LIMIT", "value": "1"}],
        })
        assert isinstance(command.options[0], OptionDefinition)
        assert isinstance(command.flags[0], FlagDefinition)
        assert isinstance(command.env_vars[0], EnvVarDefinition)
        assert command.last_argument.name == "output"
        assert command.post_options == ()


class TestExecutionResult:
    """Tests pour ExecutionResult."""

    def test_success_et_duree(self):
        """success suit le code de sortie ; la durée vient des horodatages."""
        result = make_result()
        assert result.success
        assert result.duration == pytest.approx(0.25)
        assert result.formatted_duration() == "250.0ms"

    def test_lignes(self):
        """Les sorties sont découpées sur LF et CRLF."""
        result = make_result(stderr="avertissement\n")
        assert result.stdout_lines == ["ligne 1", "ligne 2"]
        assert result.stderr_lines == ["avertissement"]
        assert make_result(stdout="").stdout_lines == []

    def test_contains(self):
        """Recherche par sous-chaîne ou regex compilée."""
        result = make_result(stderr="Version: 7.1.1-15")
        assert result.stdout_contains("ligne 2")
        assert result.stderr_contains(re.compile(r"\d+\.\d+\.\d+"))
        assert not result.stderr_contains("absent")

    def test_frozen(self):
        """Le résultat est immuable."""
        result = make_result()
        with pytest.raises(AttributeError):
            result.exit_status = 1

    def test_to_dict(self):
        """Sérialisation avec horodatages ISO 8601."""
        data = make_result(exit_status=2).to_dict()
        assert data["exit_status"] == 2
        assert data["success"] is False
        assert data["arguments"] == ["a.png", "b.jpg"]
        assert data["started_at"] == "2024-05-01T12:00:00"

    def test_str(self):
        """Le résumé distingue succès et échec."""
        assert str(make_result()).startswith("Succès : ")
        assert "code 3" in str(make_result(exit_status=3))


class TestVersionModels:
    """Tests des modèles de version."""

    def test_methode_par_defaut(self):
        """La méthode par défaut lance ``--version``."""
        method = VersionDetectionMethod()
        assert method.type == "command"
        assert method.command == ("--version",)
        assert method.pattern == r"(\d+\.\d+)"

    def test_methode_man_page(self):
        """Les chemins de page de manuel sont indexés par plateforme."""
        method = VersionDetectionMethod.from_dict({
            "type": "man_page",
            "paths": {"macos": "/usr/share/man/man1/tar.1"},
        })
        assert method.path_for("macos") == "/usr/share/man/man1/tar.1"
        assert method.path_for("linux") is None
        hash(method)

    def test_type_inconnu(self):
        """Un type de méthode inconnu est refusé."""
        with pytest.raises(ValidationError):
            VersionDetectionMethod(type="registry")

    def test_version_info(self):
        """unknown n'est pas une version connue."""
        assert VersionInfo("7.1").is_known
        assert not VersionInfo("unknown").is_known


class TestExecutableInfo:
    """Tests pour ExecutableInfo."""

    def test_description_path(self):
        info = ExecutableInfo("/usr/bin/gs", ExecutableSource.PATH, "bash")
        assert not info.is_alias
        assert info.description == "Trouvé dans le PATH : /usr/bin/gs"

    def test_description_alias(self):
        info = ExecutableInfo(
            "/usr/bin/gs", ExecutableSource.ALIAS, "zsh",
            alias_definition="gs is an alias for ghostscript",
        )
        assert info.is_alias
        assert info.description == (
            "Alias du shell zsh : gs is an alias for ghostscript"
        )
