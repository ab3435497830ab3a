"""
Repository protocol consumed by the controllers.
"""

from typing import List, Optional, Protocol

from .models import SourceObject, TargetObject


class ObjectRepository(Protocol):
    """Read/write access to source and target objects.

    ``get_*`` raise NotFoundError for missing objects. ``update_target``
    raises ConflictError when the stored resource version differs from the
    one on the object being written.
    """

    def get_source(self, namespace: str, name: str) -> SourceObject:
        ...

    def get_target(self, namespace: str, name: str) -> TargetObject:
        ...

    def list_targets(self, namespace: Optional[str] = None) -> List[TargetObject]:
        ...

    def update_target(self, target: TargetObject) -> TargetObject:
        ...
