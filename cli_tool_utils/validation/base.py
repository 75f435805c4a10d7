"""Interface abstraite pour la validation."""

from abc import ABC, abstractmethod
from typing import Any


class Validator(ABC):
    """
    Interface abstraite pour les validateurs de valeurs.

    Permet l'injection de dépendance et facilite les tests
    en permettant de substituer l'implémentation réelle par un mock.
    """

    @abstractmethod
    def validate(self, value: Any) -> Any:
        """
        Valide une valeur et la retourne normalisée.

        Args:
            value: Valeur brute fournie par l'appelant

        Returns:
            Valeur convertie dans le type attendu

        Raises:
            ValidationError: Si la valeur viole une contrainte
        """
        pass
