"""
Stack Module
Conditional assembly of a GKE application stack
"""

from .component import GkeStack, default_composers
from .errors import StackConfigError
from .normalize import IDENTITY_LABEL, merge_labels, normalize
from .resolver import RULES, Absent, Composers, Present, ResolvedState, Rule, resolve
from .types import Allocation, ContainerSpec, ExtraPort, NormalizedStack, Sidecar, StackConfig

__all__ = [
    "GkeStack",
    "default_composers",
    "StackConfigError",
    "IDENTITY_LABEL",
    "merge_labels",
    "normalize",
    "RULES",
    "Absent",
    "Composers",
    "Present",
    "ResolvedState",
    "Rule",
    "resolve",
    "Allocation",
    "ContainerSpec",
    "ExtraPort",
    "NormalizedStack",
    "Sidecar",
    "StackConfig",
]
