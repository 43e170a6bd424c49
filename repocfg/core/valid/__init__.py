"""
Valid: representación resuelta (con defaults) de atlantis.yaml.
"""

from repocfg.core.valid.models import (
    DEFAULT_WORKSPACE,
    Autoplan,
    Project,
    Spec,
    Stage,
    Step,
    Workflow,
)

__all__ = ["DEFAULT_WORKSPACE", "Autoplan", "Project", "Spec", "Stage", "Step", "Workflow"]
