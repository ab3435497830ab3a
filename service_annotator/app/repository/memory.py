"""
In-memory object repository with optimistic concurrency.
"""

import copy
import threading
from typing import Dict, List, Optional, Tuple

from shared.errors import ConflictError, NotFoundError
from shared.logging import get_logger
from .models import SourceObject, TargetObject


ObjectKey = Tuple[str, str]


class InMemoryObjectRepository:
    """Thread-safe object repository backed by dictionaries.

    Objects are copied on the way in and out so callers never share state
    with the repository. Every successful write bumps the resource version.
    """

    def __init__(self):
        self.logger = get_logger("annotator.repository")
        self._lock = threading.Lock()
        self._sources: Dict[ObjectKey, SourceObject] = {}
        self._targets: Dict[ObjectKey, TargetObject] = {}

    def put_source(self, source: SourceObject) -> SourceObject:
        """Create or replace a source object unconditionally."""
        with self._lock:
            key = (source.namespace, source.name)
            previous = self._sources.get(key)
            stored = copy.deepcopy(source)
            stored.resource_version = (previous.resource_version if previous else 0) + 1
            self._sources[key] = stored
            return copy.deepcopy(stored)

    def put_target(self, target: TargetObject) -> TargetObject:
        """Create or replace a target object unconditionally."""
        with self._lock:
            key = (target.namespace, target.name)
            previous = self._targets.get(key)
            stored = copy.deepcopy(target)
            stored.resource_version = (previous.resource_version if previous else 0) + 1
            self._targets[key] = stored
            return copy.deepcopy(stored)

    def delete_source(self, namespace: str, name: str) -> None:
        with self._lock:
            if self._sources.pop((namespace, name), None) is None:
                raise NotFoundError("source", namespace, name)

    def delete_target(self, namespace: str, name: str) -> None:
        with self._lock:
            if self._targets.pop((namespace, name), None) is None:
                raise NotFoundError("target", namespace, name)

    def get_source(self, namespace: str, name: str) -> SourceObject:
        with self._lock:
            source = self._sources.get((namespace, name))
            if source is None:
                raise NotFoundError("source", namespace, name)
            return copy.deepcopy(source)

    def get_target(self, namespace: str, name: str) -> TargetObject:
        with self._lock:
            target = self._targets.get((namespace, name))
            if target is None:
                raise NotFoundError("target", namespace, name)
            return copy.deepcopy(target)

    def list_targets(self, namespace: Optional[str] = None) -> List[TargetObject]:
        with self._lock:
            targets = [
                copy.deepcopy(target) for key, target in sorted(self._targets.items())
                if namespace is None or key[0] == namespace
            ]
        return targets

    def update_target(self, target: TargetObject) -> TargetObject:
        """Write ``target`` if its resource version is current."""
        with self._lock:
            key = (target.namespace, target.name)
            stored = self._targets.get(key)
            if stored is None:
                raise NotFoundError("target", target.namespace, target.name)
            if stored.resource_version != target.resource_version:
                self.logger.info(
                    "Target update conflict",
                    target=target.key,
                    expected_version=stored.resource_version,
                    actual_version=target.resource_version
                )
                raise ConflictError(
                    f"target {target.key} has been modified; reconcile again with the latest version",
                    {
                        "namespace": target.namespace,
                        "name": target.name,
                        "resource_version": target.resource_version,
                        "current_version": stored.resource_version,
                    }
                )
            updated = copy.deepcopy(target)
            updated.resource_version = stored.resource_version + 1
            self._targets[key] = updated
            return copy.deepcopy(updated)
