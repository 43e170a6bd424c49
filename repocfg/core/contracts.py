"""
Contratos que deben cumplir las estructuras crudas del manifiesto.

El pipeline de ParserValidator solo depende de estas interfaces;
la forma concreta del esquema vive en repocfg.core.raw.
"""

from typing import Protocol, TypeVar

T_co = TypeVar("T_co", covariant=True)


class Validatable(Protocol):
    """Protocolo: estructura con reglas propias por campo."""
    def validate_structure(self) -> None:
        """Lanza ValidationError si alguna regla de campo no se cumple."""
        ...


class Resolvable(Protocol[T_co]):
    """Protocolo: estructura cruda convertible a su forma resuelta (con defaults)."""
    def to_valid(self) -> T_co:
        """Aplica defaults y devuelve la estructura resuelta. No falla si ya fue validada."""
        ...
