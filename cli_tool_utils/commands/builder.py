"""Construction de la liste d'arguments d'une commande déclarée.

Ce module fournit CommandArgumentBuilder, qui transforme une
CommandDefinition et une table de paramètres typés en liste d'arguments
ordonnée :

    [sous-commande] [options...] [drapeaux...] [positionnels triés]
    [post-options...] [dernier argument]

L'ordre ne dépend que des listes déclarées dans la définition, jamais
de l'ordre des clés de la table de paramètres.

Example:
    Construction des arguments d'une conversion ImageMagick :

        from cli_tool_utils.commands import CommandArgumentBuilder
        from cli_tool_utils.shell import BashAdapter

        builder = CommandArgumentBuilder(BashAdapter(), platform="linux")
        args = builder.build(convert, {"inputs": ["a.png"], "output": "b.jpg"})
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from cli_tool_utils.errors.exceptions import ValidationError
from cli_tool_utils.logging.debug import DebugTracer
from cli_tool_utils.models.definitions import (ArgumentDefinition,
                                               CommandDefinition,
                                               FlagDefinition, FormatStyle,
                                               OptionDefinition)
from cli_tool_utils.shell.base import ShellAdapter
from cli_tool_utils.validation.parameter import ParameterValidator, stringify


class CommandArgumentBuilder:
    """Produit les arguments d'une commande pour un shell et une plateforme.

    Attributes:
        shell: Adaptateur actif (formatage des chemins de type file).
        platform: Plateforme cible ; None désactive le filtrage.
    """

    def __init__(
        self,
        shell: ShellAdapter,
        platform: Optional[str] = None,
        tracer: Optional[DebugTracer] = None,
    ) -> None:
        """Initialise le constructeur.

        Args:
            shell: Adaptateur du shell cible.
            platform: ``macos``, ``linux`` ou ``windows``.
            tracer: Traceur de diagnostic (défaut: selon CLI_TOOL_UTILS_DEBUG).
        """
        self.shell = shell
        self.platform = platform
        self._tracer = tracer or DebugTracer()

    def build(
        self, command: CommandDefinition, params: Mapping[str, Any]
    ) -> List[str]:
        """Construit la liste d'arguments ordonnée.

        Args:
            command: Définition de la commande.
            params: Valeurs des paramètres, indexées par nom.

        Returns:
            Liste de jetons, sans l'exécutable.

        Raises:
            ValidationError: Si une valeur viole sa contrainte, si un
                argument requis manque ou si deux drapeaux actifs sont
                incompatibles. Aucune liste partielle n'est retournée.
        """
        args: List[str] = []

        if command.subcommand:
            args.append(command.subcommand)

        args.extend(self._build_options(command.options, params))
        args.extend(self._build_flags(command.flags, params))

        for arg_def in command.regular_arguments:
            args.extend(self._build_argument(arg_def, params))

        args.extend(self._build_options(command.post_options, params))

        last = command.last_argument
        if last is not None:
            args.extend(self._build_argument(last, params))

        self._tracer.section(
            f"arguments de {command.name}",
            shell=self.shell.name,
            platform=self.platform,
            params=dict(params),
            args=args,
        )
        return args

    def build_env_vars(
        self, command: CommandDefinition, params: Mapping[str, Any]
    ) -> Dict[str, str]:
        """Variables d'environnement déclarées, filtrées par plateforme.

        Une variable prend sa valeur fixe, sinon la valeur du paramètre
        nommé par ``env_var`` ; sans valeur, elle est omise.
        """
        env: Dict[str, str] = {}
        for env_def in command.env_vars:
            if not env_def.applies_to(self.platform):
                continue
            value = env_def.value
            if value is None and env_def.env_var:
                value = params.get(env_def.env_var)
            if value is not None:
                env[env_def.name] = stringify(value)
        return env

    def _build_options(
        self, options: Sequence[OptionDefinition], params: Mapping[str, Any]
    ) -> List[str]:
        tokens: List[str] = []
        for opt_def in options:
            if not opt_def.applies_to(self.platform):
                continue
            value = params.get(opt_def.name)
            if value is None:
                continue
            tokens.extend(t for t in self.format_option(opt_def, value) if t)
        return tokens

    def format_option(self, opt_def: OptionDefinition, value: Any) -> List[str]:
        """Formate une option selon son style.

        Args:
            opt_def: Définition de l'option.
            value: Valeur non nulle.

        Returns:
            Zéro, un ou deux jetons.

        Raises:
            ValidationError: Si la valeur est invalide.
        """
        cli = opt_def.cli
        style = opt_def.format

        if opt_def.is_boolean:
            enabled = ParameterValidator.for_definition(opt_def).validate(value)
            return [cli] if enabled else []

        if isinstance(value, (list, tuple)) or opt_def.type == "array":
            items = ParameterValidator(
                opt_def.name,
                "array",
                range=opt_def.range,
                values=opt_def.values,
                of=opt_def.of if opt_def.type == "array" else opt_def.type,
            ).validate(value)
            joined = opt_def.separator.join(stringify(item) for item in items)
            return self._shape(cli, joined, style, glue="")

        validated = ParameterValidator.for_definition(opt_def).validate(value)
        return self._shape(
            cli, stringify(validated), style, glue=opt_def.separator
        )

    @staticmethod
    def _shape(cli: str, value: str, style: FormatStyle, glue: str) -> List[str]:
        if style.is_equals:
            return [f"{cli}{glue}{value}"]
        if style.is_space:
            return [cli, value]
        if style == FormatStyle.SLASH_COLON:
            return [f"{cli}:{value}"]
        return [f"{cli} {value}"]

    def _build_flags(
        self, flags: Sequence[FlagDefinition], params: Mapping[str, Any]
    ) -> List[str]:
        active: List[FlagDefinition] = []
        for flag_def in flags:
            if not flag_def.applies_to(self.platform):
                continue
            value = params.get(flag_def.name)
            if value is None:
                value = flag_def.default
            enabled = ParameterValidator(flag_def.name, "boolean").validate(value)
            if enabled and flag_def.cli:
                active.append(flag_def)

        self._check_conflicts(active)
        return [flag_def.cli for flag_def in self._order_flags(active)]

    @staticmethod
    def _check_conflicts(active: Sequence[FlagDefinition]) -> None:
        names = {flag_def.name for flag_def in active}
        for flag_def in active:
            for other in flag_def.conflicts_with:
                if other in names:
                    raise ValidationError(
                        f"incompatible avec le drapeau '{other}'",
                        parameter_name=flag_def.name,
                        constraint=f"conflicts_with {other}",
                    )

    @staticmethod
    def _order_flags(active: Sequence[FlagDefinition]) -> List[FlagDefinition]:
        """Applique position_constraint puis position_after.

        Les contraintes ne déplacent un drapeau qu'à l'intérieur du
        groupe des drapeaux.
        """
        ordered = (
            [f for f in active if f.position_constraint == "first"]
            + [f for f in active if f.position_constraint is None]
            + [f for f in active if f.position_constraint == "last"]
        )
        for flag_def in [f for f in ordered if f.position_after]:
            names = [f.name for f in ordered]
            if flag_def.position_after not in names:
                continue
            ordered.pop(names.index(flag_def.name))
            anchor = [f.name for f in ordered].index(flag_def.position_after)
            ordered.insert(anchor + 1, flag_def)
        return ordered

    def _build_argument(
        self, arg_def: ArgumentDefinition, params: Mapping[str, Any]
    ) -> List[str]:
        value = params.get(arg_def.name)
        if value is None:
            if arg_def.required:
                raise ValidationError(
                    "argument requis manquant",
                    parameter_name=arg_def.name,
                    constraint="required",
                )
            return []

        if arg_def.variadic or arg_def.type == "array":
            items = ParameterValidator(
                arg_def.name,
                "array",
                min_items=arg_def.min,
                max_items=arg_def.max,
            ).validate(value)
            return [self.format_argument(arg_def, item) for item in items]
        return [self.format_argument(arg_def, value)]

    def format_argument(self, arg_def: ArgumentDefinition, value: Any) -> str:
        """Valide et formate une valeur positionnelle.

        Les valeurs de type ``file`` passent par ``format_path`` du shell.
        """
        validated = ParameterValidator.for_definition(
            arg_def, type_name=arg_def.element_type
        ).validate(value)
        token = stringify(validated)
        if arg_def.element_type == "file":
            token = self.shell.format_path(token)
        return token
