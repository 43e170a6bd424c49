"""
Raw: atlantis.yaml tal como se escribe, antes de aplicar defaults.
"""

from repocfg.core.raw.models import Autoplan, Project, Spec, Stage, Step, Workflow

__all__ = ["Autoplan", "Project", "Spec", "Stage", "Step", "Workflow"]
