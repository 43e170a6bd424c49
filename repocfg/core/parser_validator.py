"""
Lectura, validación y resolución de atlantis.yaml.

Pipeline lineal; cualquier falla corta el resto:
  leer archivo -> decodificar (estricto) -> reglas por campo
  -> workflows referenciados existen -> resolver defaults
  -> nombres únicos y dir/workspace sin ambigüedad

Nunca se devuelve un Spec parcial: o Spec válido o ConfigError.
"""

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import pydantic
import yaml

from repocfg.core import raw, valid
from repocfg.core.contracts import Resolvable, Validatable
from repocfg.core.errors import (
    ConfigError,
    DecodeError,
    ErrorKind,
    IdentityConflictError,
    ValidationError,
    WorkflowReferenceError,
)
from repocfg.core.raw import loader

# Nombre del archivo de configuración de cada repo.
ATLANTIS_YAML_FILENAME = "atlantis.yaml"


class ParserValidator:
    """Lee el atlantis.yaml de un repo y devuelve su Spec resuelto."""

    def read_config(self, repo_dir: Union[str, Path]) -> valid.Spec:
        """
        Devuelve la config parseada y validada de `repo_dir`.

        Si el archivo no existe se lanza ConfigError con kind NOT_FOUND;
        los llamadores lo detectan con is_not_found(err) para usar defaults.

        Raises:
            ConfigError: en cualquier falla (ver ErrorKind).
        """
        config_file = Path(repo_dir) / ATLANTIS_YAML_FILENAME
        try:
            config_data = config_file.read_bytes()
        except FileNotFoundError as e:
            raise ConfigError(
                ErrorKind.NOT_FOUND, f"{ATLANTIS_YAML_FILENAME} not found in {repo_dir}", cause=e
            ) from e
        except OSError as e:
            # Existe pero no se pudo leer (permisos, es un directorio, I/O)
            raise ConfigError(
                ErrorKind.READ_FAILURE, f"unable to read {ATLANTIS_YAML_FILENAME} file: {e}", cause=e
            ) from e

        try:
            return self.parse_and_validate(config_data)
        except (DecodeError, ValidationError) as e:
            raise ConfigError(e.kind, f"parsing {ATLANTIS_YAML_FILENAME}: {e}", cause=e) from e

    def parse_and_validate(self, config_data: bytes) -> valid.Spec:
        """Mismo pipeline que read_config pero sobre bytes ya leídos y sin envolver errores."""
        raw_spec = self._decode(config_data)

        self._validate(raw_spec)

        # Validación de nivel superior sobre el spec crudo.
        self.validate_workflows(raw_spec)

        valid_spec = self._resolve(raw_spec)
        self.validate_project_names(valid_spec)
        return valid_spec

    def _decode(self, config_data: bytes) -> raw.Spec:
        try:
            data = loader.load(config_data)
        except yaml.YAMLError as e:
            raise DecodeError(str(e)) from e
        if data is None:
            data = {}
        try:
            return raw.Spec.model_validate(data)
        except pydantic.ValidationError as e:
            raise DecodeError(str(e)) from e

    def _validate(self, spec: Validatable) -> None:
        spec.validate_structure()

    def _resolve(self, spec: Resolvable[valid.Spec]) -> valid.Spec:
        return spec.to_valid()

    def validate_workflows(self, spec: raw.Spec) -> None:
        """Todo workflow referenciado por un proyecto debe estar definido. Falla en el primero."""
        workflows = spec.workflows or {}
        for project in spec.projects or []:
            self._validate_workflow_exists(project, workflows)

    def _validate_workflow_exists(self, project: raw.Project, workflows: Mapping[str, Optional[raw.Workflow]]) -> None:
        if project.workflow is None:
            return
        if project.workflow not in workflows:
            raise WorkflowReferenceError(f'workflow "{project.workflow}" is not defined')

    def validate_project_names(self, spec: valid.Spec) -> None:
        """
        Nombres únicos y cada combinación dir/workspace repetida con nombre.

        Solo se exige nombre al proyecto que llega a un dir/workspace ya visto;
        el primero puede quedar sin nombre aunque los siguientes lo tengan.
        """
        # Primero, que todos los nombres sean únicos.
        seen = set()
        for project in spec.projects:
            if project.name is None:
                continue
            if project.name in seen:
                raise IdentityConflictError(
                    f'found two or more projects with name "{project.name}"; project names must be unique'
                )
            seen.add(project.name)

        # Luego, que las combinaciones dir/workspace repetidas estén nombradas.
        # Clave 'dir/workspace' -> nombres de los proyectos con esa clave ("" = sin nombre).
        dir_workspace_to_names: Dict[str, List[str]] = {}
        for project in spec.projects:
            key = f"{project.dir}/{project.workspace}"
            names = dir_workspace_to_names.setdefault(key, [])

            if names and project.name is None:
                raise IdentityConflictError(
                    f'there are two or more projects with dir: "{project.dir}" workspace: "{project.workspace}" '
                    "that are not all named; they must have a 'name' key so they can be targeted for apply's separately"
                )
            names.append(project.get_name())


def read_config(repo_dir: Union[str, Path]) -> valid.Spec:
    """Atajo de ParserValidator().read_config(repo_dir)."""
    return ParserValidator().read_config(repo_dir)
