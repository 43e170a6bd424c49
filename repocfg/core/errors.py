"""
Errores del lector de atlantis.yaml.

El core solo define excepciones; las capas (CLI/API) se encargan del formato de salida.
Toda falla de read_config llega al llamador como ConfigError con un ErrorKind explícito.
"""

from enum import Enum
from typing import Optional, Sequence, Union


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    READ_FAILURE = "read_failure"
    DECODE_FAILURE = "decode_failure"
    VALIDATION_FAILURE = "validation_failure"
    WORKFLOW_REFERENCE = "workflow_reference"
    IDENTITY_CONFLICT = "identity_conflict"


class RepoCfgError(Exception):
    """Error base de repocfg."""
    pass


class DecodeError(RepoCfgError):
    """YAML mal formado, tipo incorrecto o clave desconocida."""
    kind = ErrorKind.DECODE_FAILURE


PathSegment = Union[str, int]


def format_path(path: Sequence[PathSegment]) -> str:
    """('projects', 0, 'dir') -> 'projects[0].dir'"""
    out = ""
    for seg in path:
        if isinstance(seg, int):
            out += f"[{seg}]"
        elif out:
            out += f".{seg}"
        else:
            out = str(seg)
    return out


class ValidationError(RepoCfgError):
    """
    Regla de validación incumplida.

    `reason` es el motivo y `path` la ubicación dentro del manifiesto;
    el mensaje final es "<path>: <reason>" (o solo el motivo si no hay path).
    """
    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, reason: str, path: Sequence[PathSegment] = ()):
        self.reason = reason
        self.path = tuple(path)
        where = format_path(self.path)
        super().__init__(f"{where}: {reason}" if where else reason)

    def at(self, *segments: PathSegment) -> "ValidationError":
        """Devuelve el mismo error ubicado bajo `segments`."""
        return type(self)(self.reason, segments + self.path)


class WorkflowReferenceError(ValidationError):
    """Un proyecto referencia un workflow que no está definido."""
    kind = ErrorKind.WORKFLOW_REFERENCE


class IdentityConflictError(ValidationError):
    """Nombre duplicado o dir/workspace ambiguo entre proyectos."""
    kind = ErrorKind.IDENTITY_CONFLICT


class ConfigError(RepoCfgError):
    """
    Falla terminal al leer la configuración de un repo.

    `kind` indica la categoría (ErrorKind) y `cause` la excepción original.
    Los llamadores usan is_not_found() para aplicar "sin config = defaults".
    """

    def __init__(self, kind: ErrorKind, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.kind = kind
        self.cause = cause


def is_not_found(err: BaseException) -> bool:
    """True solo si el error indica que atlantis.yaml no existe."""
    return isinstance(err, ConfigError) and err.kind is ErrorKind.NOT_FOUND
