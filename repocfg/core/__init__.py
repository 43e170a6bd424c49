"""
Core: lectura y validación de atlantis.yaml (lógica pura).

ENFORCEMENT (arquitectura limpia):
- Este paquete NO debe importar repocfg.cli ni escribir en consola.
- Permitido: typing, pathlib.Path, pydantic, yaml, repocfg.core.*.
- La CLI importa desde core; nunca al revés.
"""

from repocfg.core.errors import (
    ConfigError,
    DecodeError,
    ErrorKind,
    IdentityConflictError,
    RepoCfgError,
    ValidationError,
    WorkflowReferenceError,
    is_not_found,
)
from repocfg.core.parser_validator import ATLANTIS_YAML_FILENAME, ParserValidator, read_config

__all__ = [
    "ATLANTIS_YAML_FILENAME",
    "ConfigError",
    "DecodeError",
    "ErrorKind",
    "IdentityConflictError",
    "ParserValidator",
    "RepoCfgError",
    "ValidationError",
    "WorkflowReferenceError",
    "is_not_found",
    "read_config",
]
