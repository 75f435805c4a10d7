"""Définitions typées des commandes d'un outil en ligne de commande.

Ce module définit les enregistrements immuables consommés par le
constructeur d'arguments :
    - FormatStyle : forme des jetons d'une option (``--x=v``, ``/x:v``...).
    - OptionDefinition, FlagDefinition, ArgumentDefinition,
      EnvVarDefinition : métadonnées d'un paramètre.
    - CommandDefinition : une commande complète.

Les profils chargés depuis YAML/JSON par une couche externe sont
convertis une seule fois via ``from_dict`` ; le reste de la
bibliothèque ne manipule jamais de dictionnaires bruts.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from cli_tool_utils.errors.exceptions import ValidationError

PARAMETER_TYPES = (
    "string", "file", "integer", "float", "symbol",
    "boolean", "uri", "datetime", "hash", "array",
)

# Rang numérique des positions symboliques
FIRST_POSITION = 1
LAST_POSITION = 999
DEFAULT_POSITION = 99


class FormatStyle(StrEnum):
    """Forme des jetons produits pour une option avec valeur."""

    DOUBLE_DASH_EQUALS = "double_dash_equals"
    DOUBLE_DASH_SPACE = "double_dash_space"
    SINGLE_DASH_EQUALS = "single_dash_equals"
    SINGLE_DASH_SPACE = "single_dash_space"
    SLASH_COLON = "slash_colon"
    SLASH_SPACE = "slash_space"

    @property
    def is_equals(self) -> bool:
        return self in (
            FormatStyle.DOUBLE_DASH_EQUALS, FormatStyle.SINGLE_DASH_EQUALS
        )

    @property
    def is_space(self) -> bool:
        return self in (
            FormatStyle.DOUBLE_DASH_SPACE, FormatStyle.SINGLE_DASH_SPACE
        )


def _as_tuple(value: Any) -> Tuple[Any, ...]:
    """Normalise None, scalaire ou séquence en tuple."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def _check_type(owner: str, name: str, type_name: str) -> None:
    if type_name not in PARAMETER_TYPES:
        raise ValidationError(
            f"type inconnu {type_name!r} (attendus : "
            f"{', '.join(PARAMETER_TYPES)})",
            parameter_name=name,
            constraint=f"{owner}.type",
        )


def _applies_to(platforms: Tuple[str, ...], platform: Optional[str]) -> bool:
    if not platforms or platform is None:
        return True
    return platform in platforms


@dataclass(frozen=True)
class OptionDefinition:
    """Option avec valeur (``--output=x``, ``-density 300``...).

    Attributes:
        name: Nom du paramètre dans la table des paramètres.
        cli: Chaîne d'option telle qu'attendue par l'outil.
        type: Type du paramètre (voir PARAMETER_TYPES).
        format: Forme des jetons produits.
        separator: Séparateur valeur / éléments de tableau.
        range: Bornes (min, max) pour les types numériques.
        values: Valeurs autorisées (type symbol).
        of: Type des éléments pour un tableau.
        platforms: Plateformes concernées (vide : toutes).
    """

    name: str
    cli: str
    type: str = "string"
    format: FormatStyle = FormatStyle.SINGLE_DASH_SPACE
    separator: str = "="
    range: Tuple[float, ...] = ()
    values: Tuple[str, ...] = ()
    of: Optional[str] = None
    platforms: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _check_type("option", self.name, self.type)
        try:
            object.__setattr__(self, "format", FormatStyle(self.format))
        except ValueError:
            raise ValidationError(
                f"format inconnu {self.format!r}",
                parameter_name=self.name,
                constraint="option.format",
            )
        object.__setattr__(self, "range", _as_tuple(self.range))
        object.__setattr__(self, "values", _as_tuple(self.values))
        object.__setattr__(self, "platforms", _as_tuple(self.platforms))

    @property
    def is_boolean(self) -> bool:
        return self.type == "boolean"

    def applies_to(self, platform: Optional[str]) -> bool:
        return _applies_to(self.platforms, platform)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptionDefinition":
        """Construit une option depuis un mapping déjà parsé."""
        return cls(
            name=data["name"],
            cli=data.get("cli") or "",
            type=data.get("type") or "string",
            format=data.get("format") or FormatStyle.SINGLE_DASH_SPACE,
            separator=data.get("separator") or "=",
            range=data.get("range"),
            values=data.get("values"),
            of=data.get("of"),
            platforms=data.get("platforms"),
        )


@dataclass(frozen=True)
class FlagDefinition:
    """Drapeau booléen (``--verbose``).

    Attributes:
        name: Nom du paramètre.
        cli: Chaîne émise quand le drapeau est actif.
        cli_short: Forme courte éventuelle (documentaire).
        default: Valeur par défaut.
        platforms: Plateformes concernées (vide : toutes).
        position_constraint: ``first`` ou ``last`` dans le groupe des drapeaux.
        position_after: Nom d'un drapeau qui doit précéder celui-ci.
        conflicts_with: Drapeaux incompatibles.
    """

    name: str
    cli: str
    cli_short: Optional[str] = None
    default: bool = False
    platforms: Tuple[str, ...] = ()
    position_constraint: Optional[str] = None
    position_after: Optional[str] = None
    conflicts_with: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.position_constraint not in (None, "first", "last"):
            raise ValidationError(
                f"position_constraint invalide {self.position_constraint!r}"
                " (attendu : first ou last)",
                parameter_name=self.name,
                constraint="flag.position_constraint",
            )
        object.__setattr__(self, "default", bool(self.default))
        object.__setattr__(self, "platforms", _as_tuple(self.platforms))
        object.__setattr__(
            self, "conflicts_with", _as_tuple(self.conflicts_with)
        )

    def applies_to(self, platform: Optional[str]) -> bool:
        return _applies_to(self.platforms, platform)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlagDefinition":
        return cls(
            name=data["name"],
            cli=data.get("cli") or "",
            cli_short=data.get("cli_short"),
            default=bool(data.get("default", False)),
            platforms=data.get("platforms"),
            position_constraint=data.get("position_constraint"),
            position_after=data.get("position_after"),
            conflicts_with=data.get("conflicts_with"),
        )


@dataclass(frozen=True)
class ArgumentDefinition:
    """Argument positionnel.

    Attributes:
        name: Nom du paramètre.
        type: Type de chaque valeur (voir PARAMETER_TYPES).
        position: Entier, ``"first"`` ou ``"last"``.
        variadic: Un tableau est déplié en un jeton par élément.
        min: Cardinalité minimale (variadique).
        max: Cardinalité maximale (variadique).
        required: Lève ValidationError si absent.
        of: Type des éléments (variadique).
        range: Bornes numériques.
        values: Valeurs autorisées.
    """

    name: str
    type: str = "string"
    position: Union[int, str] = DEFAULT_POSITION
    variadic: bool = False
    min: Optional[int] = None
    max: Optional[int] = None
    required: bool = False
    of: Optional[str] = None
    range: Tuple[float, ...] = ()
    values: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _check_type("argument", self.name, self.type)
        position = self.position
        if isinstance(position, str) and position.strip().isdigit():
            position = int(position.strip())
        if not isinstance(position, int) and position not in ("first", "last"):
            position = DEFAULT_POSITION
        object.__setattr__(self, "position", position)
        object.__setattr__(self, "range", _as_tuple(self.range))
        object.__setattr__(self, "values", _as_tuple(self.values))

    @property
    def is_last(self) -> bool:
        return self.position == "last"

    @property
    def numeric_position(self) -> int:
        """Rang de tri : ``first`` vaut 1, ``last`` vaut 999."""
        if self.position == "first":
            return FIRST_POSITION
        if self.position == "last":
            return LAST_POSITION
        return int(self.position)

    @property
    def element_type(self) -> str:
        """Type à valider pour chaque élément émis."""
        if self.type == "array":
            return self.of or "string"
        return self.type

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ArgumentDefinition":
        return cls(
            name=data["name"],
            type=data.get("type") or "string",
            position=data.get("position", DEFAULT_POSITION),
            variadic=bool(data.get("variadic", False)),
            min=data.get("min"),
            max=data.get("max"),
            required=bool(data.get("required", False)),
            of=data.get("of"),
            range=data.get("range"),
            values=data.get("values"),
        )


@dataclass(frozen=True)
class EnvVarDefinition:
    """Variable d'environnement transmise au processus enfant.

    La valeur est soit fixe (``value``), soit lue dans le paramètre
    nommé par ``env_var``.
    """

    name: str
    value: Optional[str] = None
    env_var: Optional[str] = None
    platforms: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "platforms", _as_tuple(self.platforms))

    def applies_to(self, platform: Optional[str]) -> bool:
        return _applies_to(self.platforms, platform)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnvVarDefinition":
        return cls(
            name=data["name"],
            value=data.get("value"),
            env_var=data.get("env_var"),
            platforms=data.get("platforms"),
        )


@dataclass(frozen=True)
class CommandDefinition:
    """Commande d'un outil : sous-commande, options, drapeaux, arguments.

    Invariant : au plus un argument positionné ``last``.

    Attributes:
        name: Nom de la commande dans le profil.
        subcommand: Premier jeton émis (ex: ``convert``).
        options: Options émises avant les drapeaux.
        flags: Drapeaux booléens.
        arguments: Arguments positionnels.
        post_options: Options émises entre les positionnels et le
            dernier argument.
        env_vars: Variables d'environnement déclarées.
    """

    name: str
    subcommand: Optional[str] = None
    options: Tuple[OptionDefinition, ...] = ()
    flags: Tuple[FlagDefinition, ...] = ()
    arguments: Tuple[ArgumentDefinition, ...] = ()
    post_options: Tuple[OptionDefinition, ...] = ()
    env_vars: Tuple[EnvVarDefinition, ...] = ()

    def __post_init__(self) -> None:
        for attr in ("options", "flags", "arguments", "post_options", "env_vars"):
            object.__setattr__(self, attr, _as_tuple(getattr(self, attr)))
        last = [arg.name for arg in self.arguments if arg.is_last]
        if len(last) > 1:
            raise ValidationError(
                f"la commande '{self.name}' déclare plusieurs arguments "
                f"'last' : {', '.join(last)}",
                constraint="at most one last argument",
            )

    @property
    def last_argument(self) -> Optional[ArgumentDefinition]:
        for arg in self.arguments:
            if arg.is_last:
                return arg
        return None

    @property
    def regular_arguments(self) -> Tuple[ArgumentDefinition, ...]:
        """Arguments non ``last``, triés par position (tri stable)."""
        return tuple(sorted(
            (arg for arg in self.arguments if not arg.is_last),
            key=lambda arg: arg.numeric_position,
        ))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CommandDefinition":
        """Construit une commande depuis un mapping déjà parsé.

        Args:
            data: Mapping issu d'un profil (clés ``name``, ``subcommand``,
                ``options``, ``flags``, ``arguments``, ``post_options``,
                ``env_vars``).

        Returns:
            CommandDefinition typée.

        Raises:
            ValidationError: Si une définition est invalide.
            KeyError: Si ``name`` manque.
        """
        def build(key: str, factory) -> Sequence[Any]:
            return tuple(factory(item) for item in data.get(key) or ())

        return cls(
            name=data["name"],
            subcommand=data.get("subcommand"),
            options=build("options", OptionDefinition.from_dict),
            flags=build("flags", FlagDefinition.from_dict),
            arguments=build("arguments", ArgumentDefinition.from_dict),
            post_options=build("post_options", OptionDefinition.from_dict),
            env_vars=build("env_vars", EnvVarDefinition.from_dict),
        )
