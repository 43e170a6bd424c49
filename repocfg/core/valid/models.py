"""
Modelos resueltos del manifiesto (agnósticos de YAML y filesystem).

Se construyen una vez por lectura desde repocfg.core.raw y nunca se mutan.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

DEFAULT_WORKSPACE = "default"
DEFAULT_AUTOPLAN_WHEN_MODIFIED: Tuple[str, ...] = ("**/*.tf*",)


@dataclass(frozen=True)
class Step:
    """Paso de un stage: built-in (init/plan/apply) o run."""
    step_name: str
    extra_args: Tuple[str, ...] = ()
    run_command: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Stage:
    steps: Tuple[Step, ...] = ()


DEFAULT_PLAN_STAGE = Stage(steps=(Step("init"), Step("plan")))
DEFAULT_APPLY_STAGE = Stage(steps=(Step("apply"),))


@dataclass(frozen=True)
class Workflow:
    name: str
    plan: Stage = DEFAULT_PLAN_STAGE
    apply: Stage = DEFAULT_APPLY_STAGE


@dataclass(frozen=True)
class Autoplan:
    when_modified: Tuple[str, ...] = DEFAULT_AUTOPLAN_WHEN_MODIFIED
    enabled: bool = True


@dataclass(frozen=True)
class Project:
    """Proyecto resuelto. `workspace` siempre tiene valor; `name` None = sin nombre."""
    dir: str
    workspace: str = DEFAULT_WORKSPACE
    name: Optional[str] = None
    workflow: Optional[str] = None
    terraform_version: Optional[str] = None
    autoplan: Autoplan = field(default_factory=Autoplan)
    apply_requirements: Tuple[str, ...] = ()

    def get_name(self) -> str:
        """Nombre del proyecto o cadena vacía si no tiene."""
        return self.name or ""


@dataclass(frozen=True)
class Spec:
    version: Optional[int] = None
    projects: Tuple[Project, ...] = ()
    # solo lectura; fuera del hash (los mappings no son hashables)
    workflows: Mapping[str, Workflow] = field(default_factory=lambda: MappingProxyType({}), hash=False)

    def __post_init__(self):
        object.__setattr__(self, "projects", tuple(self.projects))
        object.__setattr__(self, "workflows", MappingProxyType(dict(self.workflows)))

    def find_projects_by_dir_workspace(self, dir_: str, workspace: str) -> List[Project]:
        return [p for p in self.projects if p.dir == dir_ and p.workspace == workspace]

    def find_projects_by_dir(self, dir_: str) -> List[Project]:
        return [p for p in self.projects if p.dir == dir_]

    def find_project_by_name(self, name: str) -> Optional[Project]:
        for p in self.projects:
            if p.name == name:
                return p
        return None

    def get_plan_stage(self, workflow_name: str) -> Optional[Stage]:
        """Stage de plan del workflow; None si el workflow no está definido."""
        workflow = self.workflows.get(workflow_name)
        return workflow.plan if workflow else None

    def get_apply_stage(self, workflow_name: str) -> Optional[Stage]:
        workflow = self.workflows.get(workflow_name)
        return workflow.apply if workflow else None
