"""
Object models exchanged with the object repository.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional


@dataclass
class TargetObject:
    """Annotated resource."""
    namespace: str
    name: str
    annotations: Dict[str, str] = field(default_factory=dict)
    resource_version: int = 0

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def with_annotations(self, annotations: Dict[str, str]) -> "TargetObject":
        """Copy of the object carrying ``annotations``."""
        return replace(self, annotations=dict(annotations))


@dataclass
class SourceObject:
    """Resource holding the policy text."""
    namespace: str
    name: str
    data: Dict[str, str] = field(default_factory=dict)
    resource_version: int = 0

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def policy_text(self, policy_key: str) -> Optional[str]:
        return self.data.get(policy_key)
