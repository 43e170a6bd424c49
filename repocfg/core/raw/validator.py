"""
Reglas de validación por campo (lógica pura).

Sin I/O; cada regla lanza ValidationError con el nombre del campo como path.
"""

import re
import shlex
from typing import Dict, List, Mapping, Optional
from urllib.parse import quote_plus

from repocfg.core.errors import ValidationError

SUPPORTED_VERSION = 2

INIT_STEP_NAME = "init"
PLAN_STEP_NAME = "plan"
APPLY_STEP_NAME = "apply"
RUN_STEP_NAME = "run"
EXTRA_ARGS_KEY = "extra_args"

BUILTIN_STEP_NAMES = (INIT_STEP_NAME, PLAN_STEP_NAME, APPLY_STEP_NAME)

APPROVED_APPLY_REQUIREMENT = "approved"

# Mismo formato que acepta Terraform: v0.11.7, 0.12.0-beta1, 1.2.3+meta
_VERSION_RE = re.compile(
    r"^v?[0-9]+(\.[0-9]+)*"
    r"(-([0-9]+[0-9A-Za-z\-~]*(\.[0-9A-Za-z\-~]+)*)|(-?([A-Za-z\-~]+[0-9A-Za-z\-~]*(\.[0-9A-Za-z\-~]+)*)))?"
    r"(\+([0-9A-Za-z\-~]+(\.[0-9A-Za-z\-~]+)*))?$"
)


def validate_version(version: Optional[int]) -> None:
    """La versión es opcional; si se declara debe ser la soportada."""
    if version is None:
        return
    if version != SUPPORTED_VERSION:
        raise ValidationError(f"only version {SUPPORTED_VERSION} is supported", ("version",))


def validate_dir(dir_: Optional[str]) -> None:
    if dir_ is None or not dir_.strip():
        raise ValidationError("cannot be blank", ("dir",))
    if ".." in dir_:
        raise ValidationError("cannot contain '..'", ("dir",))


def validate_apply_requirements(reqs: Optional[List[str]]) -> None:
    for req in reqs or []:
        if req != APPROVED_APPLY_REQUIREMENT:
            raise ValidationError(
                f'"{req}" not supported, only {APPROVED_APPLY_REQUIREMENT} is supported',
                ("apply_requirements",),
            )


def is_valid_terraform_version(value: str) -> bool:
    return bool(_VERSION_RE.match(value.strip()))


def validate_terraform_version(value: Optional[str]) -> None:
    if value is None:
        return
    if not is_valid_terraform_version(value):
        raise ValidationError(f'version "{value}" could not be parsed', ("terraform_version",))


def is_valid_project_name(name: str) -> bool:
    """El nombre debe ser seguro en URLs; '/' se permite (se lee como '-')."""
    without_slashes = name.replace("/", "-")
    return without_slashes == quote_plus(without_slashes)


def validate_project_name(name: Optional[str]) -> None:
    if name is None:
        return
    if name == "":
        raise ValidationError("if set cannot be empty", ("name",))
    if not is_valid_project_name(name):
        raise ValidationError(f'"{name}" is not allowed: must contain only URL safe characters', ("name",))


def _single_key(keys: List[str]) -> None:
    if len(keys) > 1:
        raise ValidationError(
            f"step element can only contain a single key, found {len(keys)}: {','.join(keys)}"
        )


def validate_step_key(key: str) -> None:
    if key not in BUILTIN_STEP_NAMES:
        raise ValidationError(f'"{key}" is not a valid step type')


def validate_builtin_step_map(elem: Mapping[str, Mapping[str, List[str]]]) -> None:
    """{init: {extra_args: [...]}}: un solo step built-in con a lo sumo extra_args."""
    _single_key(list(elem))
    for step_name, args in elem.items():
        validate_step_key(step_name)
        arg_keys = list(args)
        if len(arg_keys) > 1:
            raise ValidationError(
                f"built-in steps only support a single {EXTRA_ARGS_KEY} key, "
                f"found {len(arg_keys)}: {','.join(arg_keys)}"
            )
        for k in arg_keys:
            if k != EXTRA_ARGS_KEY:
                raise ValidationError(
                    f'built-in steps only support a single {EXTRA_ARGS_KEY} key, found "{k}" in step {step_name}'
                )


def validate_run_step_map(elem: Dict[str, str]) -> None:
    """{run: "cmd"}: una sola clave 'run' y comando separable como shell."""
    _single_key(list(elem))
    for k, command in elem.items():
        if k != RUN_STEP_NAME:
            raise ValidationError(f'"{k}" is not a valid step type')
        try:
            shlex.split(command)
        except ValueError as e:
            raise ValidationError(f'unable to parse run command "{command}": {e}')
