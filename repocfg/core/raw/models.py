"""
Modelos crudos de atlantis.yaml (tal como se escriben en el archivo).

Decodificación estricta: claves desconocidas o tipos incorrectos son error
(extra="forbid", strict=True). No se aplican defaults aquí; eso lo hace to_valid().
Cada modelo expone validate_structure() (reglas por campo) y to_valid().
"""

import posixpath
import shlex
from typing import Annotated, Dict, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, RootModel

from repocfg.core import valid
from repocfg.core.valid.models import (
    DEFAULT_APPLY_STAGE,
    DEFAULT_AUTOPLAN_WHEN_MODIFIED,
    DEFAULT_PLAN_STAGE,
)
from repocfg.core.errors import ValidationError
from repocfg.core.raw import validator as rules
from repocfg.core.raw.loader import plain_int, scalar_text


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


# Campo string que acepta escalares numéricos con su texto literal (workspace: 2019)
ScalarStr = Annotated[str, BeforeValidator(scalar_text)]
PlainInt = Annotated[int, BeforeValidator(plain_int)]


# --- Steps ---

StepValue = Union[
    str,                               # init | plan | apply
    Dict[str, Dict[str, List[str]]],   # {init: {extra_args: [...]}}
    Dict[str, str],                    # {run: "cmd"}
]


class Step(RootModel[StepValue]):
    """
    Un elemento de `steps`. Tres formas posibles:
      - init
      - init: {extra_args: ["-upgrade"]}
      - run: make plan
    """
    model_config = ConfigDict(strict=True)

    @property
    def key(self) -> Optional[str]:
        return self.root if isinstance(self.root, str) else None

    @property
    def map(self) -> Optional[Dict[str, Dict[str, List[str]]]]:
        if isinstance(self.root, dict) and self.root and all(isinstance(v, dict) for v in self.root.values()):
            return self.root
        return None

    @property
    def string_val(self) -> Optional[Dict[str, str]]:
        if isinstance(self.root, dict) and self.root and all(isinstance(v, str) for v in self.root.values()):
            return self.root
        return None

    def validate_structure(self) -> None:
        if self.key is not None:
            rules.validate_step_key(self.key)
        elif self.map is not None:
            rules.validate_builtin_step_map(self.map)
        elif self.string_val is not None:
            rules.validate_run_step_map(self.string_val)
        else:
            raise ValidationError("step element is empty")

    def to_valid(self) -> valid.Step:
        if self.key is not None:
            return valid.Step(step_name=self.key)
        if self.map is not None:
            # validate_structure() garantiza una sola clave
            step_name, args = next(iter(self.map.items()))
            return valid.Step(step_name=step_name, extra_args=tuple(args.get(rules.EXTRA_ARGS_KEY, [])))
        command = self.string_val[rules.RUN_STEP_NAME]
        return valid.Step(step_name=rules.RUN_STEP_NAME, run_command=tuple(shlex.split(command)))


class Stage(_RawModel):
    steps: Optional[List[Step]] = None

    def validate_structure(self) -> None:
        for i, step in enumerate(self.steps or []):
            try:
                step.validate_structure()
            except ValidationError as err:
                raise err.at("steps", i) from err

    def to_valid(self) -> valid.Stage:
        return valid.Stage(steps=tuple(s.to_valid() for s in self.steps or []))


class Workflow(_RawModel):
    plan: Optional[Stage] = None
    apply: Optional[Stage] = None

    def validate_structure(self) -> None:
        for stage_name, stage in (("plan", self.plan), ("apply", self.apply)):
            if stage is None:
                continue
            try:
                stage.validate_structure()
            except ValidationError as err:
                raise err.at(stage_name) from err

    def to_valid(self, name: str) -> valid.Workflow:
        plan = self.plan.to_valid() if self.plan is not None else DEFAULT_PLAN_STAGE
        apply = self.apply.to_valid() if self.apply is not None else DEFAULT_APPLY_STAGE
        return valid.Workflow(name=name, plan=plan, apply=apply)


# --- Projects ---

class Autoplan(_RawModel):
    when_modified: Optional[List[str]] = None
    enabled: Optional[bool] = None

    def to_valid(self) -> valid.Autoplan:
        when_modified = self.when_modified
        if when_modified is None:
            when_modified = list(DEFAULT_AUTOPLAN_WHEN_MODIFIED)
        enabled = True if self.enabled is None else self.enabled
        return valid.Autoplan(when_modified=tuple(when_modified), enabled=enabled)


class Project(_RawModel):
    name: Optional[ScalarStr] = None
    dir: Optional[ScalarStr] = None
    workspace: Optional[ScalarStr] = None
    workflow: Optional[ScalarStr] = None
    terraform_version: Optional[ScalarStr] = None
    autoplan: Optional[Autoplan] = None
    apply_requirements: Optional[List[str]] = None

    def validate_structure(self) -> None:
        rules.validate_dir(self.dir)
        rules.validate_apply_requirements(self.apply_requirements)
        rules.validate_terraform_version(self.terraform_version)
        rules.validate_project_name(self.name)

    def to_valid(self) -> valid.Project:
        cleaned_dir = posixpath.normpath(self.dir)
        # normpath conserva "//" inicial; se colapsa a una sola barra
        if cleaned_dir.startswith("//"):
            cleaned_dir = "/" + cleaned_dir.lstrip("/")
        if cleaned_dir.strip("/") == "":
            cleaned_dir = "."
        return valid.Project(
            dir=cleaned_dir,
            workspace=self.workspace or valid.DEFAULT_WORKSPACE,
            name=self.name,
            workflow=self.workflow,
            terraform_version=self.terraform_version.strip() if self.terraform_version else None,
            autoplan=self.autoplan.to_valid() if self.autoplan is not None else valid.Autoplan(),
            apply_requirements=tuple(self.apply_requirements or []),
        )


class Spec(_RawModel):
    """Raíz de atlantis.yaml."""
    version: Optional[PlainInt] = None
    projects: Optional[List[Project]] = None
    # `custom:` sin contenido equivale a un workflow con stages por defecto
    workflows: Optional[Dict[str, Optional[Workflow]]] = None

    def validate_structure(self) -> None:
        rules.validate_version(self.version)
        for i, project in enumerate(self.projects or []):
            try:
                project.validate_structure()
            except ValidationError as err:
                raise err.at("projects", i) from err
        for name, workflow in (self.workflows or {}).items():
            if workflow is None:
                continue
            try:
                workflow.validate_structure()
            except ValidationError as err:
                raise err.at("workflows", name) from err

    def to_valid(self) -> valid.Spec:
        return valid.Spec(
            version=self.version,
            projects=tuple(p.to_valid() for p in self.projects or []),
            workflows={name: (w or Workflow()).to_valid(name) for name, w in (self.workflows or {}).items()},
        )
