"""Validation typée des valeurs de paramètres.

Chaque valeur passée au constructeur d'arguments est validée contre le
type déclaré par sa définition (``string``, ``file``, ``integer``,
``float``, ``symbol``, ``boolean``, ``uri``, ``datetime``, ``hash``,
``array``) et ses contraintes (plage, valeurs autorisées, cardinalité).
"""

from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

from cli_tool_utils.errors.exceptions import ValidationError
from cli_tool_utils.models.definitions import PARAMETER_TYPES
from cli_tool_utils.validation.base import Validator

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


class ParameterValidator(Validator):
    """Valide une valeur contre un type et ses contraintes.

    Attributes:
        name: Nom du paramètre (repris dans les erreurs).
        type_name: Type attendu.
        range: Bornes (min, max) pour integer / float.
        values: Valeurs autorisées pour symbol.
        min_items: Cardinalité minimale d'un tableau.
        max_items: Cardinalité maximale d'un tableau.
        of: Type des éléments d'un tableau.
    """

    def __init__(
        self,
        name: str,
        type_name: str = "string",
        range: Sequence[float] = (),
        values: Sequence[str] = (),
        min_items: Optional[int] = None,
        max_items: Optional[int] = None,
        of: Optional[str] = None,
    ) -> None:
        if type_name not in PARAMETER_TYPES:
            raise ValidationError(
                f"type inconnu {type_name!r}",
                parameter_name=name,
                constraint="type",
            )
        self.name = name
        self.type_name = type_name
        self.range = tuple(range or ())
        self.values = tuple(values or ())
        self.min_items = min_items
        self.max_items = max_items
        self.of = of

    @classmethod
    def for_definition(
        cls, definition: Any, type_name: Optional[str] = None
    ) -> "ParameterValidator":
        """Construit un validateur depuis une option ou un argument.

        Args:
            definition: OptionDefinition ou ArgumentDefinition.
            type_name: Type à forcer (ex: ``array`` pour un variadique).
        """
        return cls(
            name=definition.name,
            type_name=type_name or definition.type,
            range=getattr(definition, "range", ()),
            values=getattr(definition, "values", ()),
            min_items=getattr(definition, "min", None),
            max_items=getattr(definition, "max", None),
            of=getattr(definition, "of", None),
        )

    def _fail(self, message: str, constraint: str) -> ValidationError:
        return ValidationError(
            message, parameter_name=self.name, constraint=constraint
        )

    def validate(self, value: Any) -> Any:
        """Valide et convertit la valeur.

        Args:
            value: Valeur brute.

        Returns:
            Valeur convertie (int, float, bool, str, datetime, list...).

        Raises:
            ValidationError: Si la valeur est invalide.
        """
        handler = getattr(self, f"_validate_{self.type_name}")
        return handler(value)

    def _validate_string(self, value: Any) -> str:
        text = str(value)
        if text == "":
            raise self._fail("la chaîne ne peut pas être vide", "non-empty")
        return text

    def _validate_file(self, value: Any) -> str:
        text = str(value)
        if text == "":
            raise self._fail("le chemin ne peut pas être vide", "non-empty path")
        return text

    def _check_range(self, number: float) -> None:
        if len(self.range) == 2:
            low, high = self.range
            if number < low or number > high:
                raise self._fail(
                    f"{number} hors de la plage [{low}, {high}]",
                    f"range [{low}, {high}]",
                )

    def _validate_integer(self, value: Any) -> int:
        if isinstance(value, bool):
            raise self._fail(f"entier invalide : {value!r}", "integer")
        raw = value.strip() if isinstance(value, str) else value
        try:
            number = int(raw)
        except (TypeError, ValueError):
            raise self._fail(f"entier invalide : {value!r}", "integer")
        if isinstance(raw, float) and raw != number:
            raise self._fail(f"entier invalide : {value!r}", "integer")
        self._check_range(number)
        return number

    def _validate_float(self, value: Any) -> float:
        if isinstance(value, bool):
            raise self._fail(f"flottant invalide : {value!r}", "float")
        raw = value.strip() if isinstance(value, str) else value
        try:
            number = float(raw)
        except (TypeError, ValueError):
            raise self._fail(f"flottant invalide : {value!r}", "float")
        self._check_range(number)
        return number

    def _validate_symbol(self, value: Any) -> str:
        text = str(value)
        if self.values and text.lower() not in {v.lower() for v in self.values}:
            raise self._fail(
                f"valeur {text!r} invalide (valeurs autorisées : "
                f"{', '.join(self.values)})",
                f"one of {list(self.values)}",
            )
        return text

    def _validate_boolean(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise self._fail(f"booléen invalide : {value!r}", "boolean")

    def _validate_uri(self, value: Any) -> str:
        text = str(value)
        if not text:
            raise self._fail("l'URI ne peut pas être vide", "uri")
        try:
            urlparse(text)
        except ValueError as e:
            raise self._fail(f"URI invalide : {text} ({e})", "uri")
        return text

    def _validate_datetime(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            raise self._fail(f"date invalide : {value!r}", "ISO 8601 datetime")

    def _validate_hash(self, value: Any) -> Mapping[Any, Any]:
        if not isinstance(value, Mapping):
            raise self._fail(
                f"dictionnaire attendu, reçu {type(value).__name__}", "hash"
            )
        return value

    def _validate_array(self, value: Any) -> List[Any]:
        items = list(value) if isinstance(value, (list, tuple)) else [value]
        if self.min_items is not None and len(items) < self.min_items:
            raise self._fail(
                f"{len(items)} élément(s), minimum {self.min_items}",
                f"min {self.min_items}",
            )
        if self.max_items is not None and len(items) > self.max_items:
            raise self._fail(
                f"{len(items)} élément(s), maximum {self.max_items}",
                f"max {self.max_items}",
            )
        if self.of and self.of != "array":
            element = ParameterValidator(
                self.name, self.of, range=self.range, values=self.values
            )
            items = [element.validate(item) for item in items]
        return items


def stringify(value: Any) -> str:
    """Représentation d'une valeur validée sous forme de jeton."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
