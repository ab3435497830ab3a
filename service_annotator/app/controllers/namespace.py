"""
Namespace controller.
"""

from typing import List, Optional

from shared.errors import ConflictError
from shared.logging import get_logger
from ..repository.base import ObjectRepository
from .target import ReconcileResult, TargetReconciler


class NamespaceReconciler:
    """Converges every target in a namespace, or in all namespaces."""

    def __init__(self, repository: ObjectRepository, target_reconciler: TargetReconciler):
        self.repository = repository
        self.target_reconciler = target_reconciler
        self.logger = get_logger("annotator.namespace_controller")

    def reconcile(self, namespace: Optional[str] = None) -> List[ReconcileResult]:
        """Reconcile all targets in ``namespace`` (all namespaces if None).

        Conflicting targets do not stop the sweep; they are reported in a
        single ConflictError once every other target has been handled.
        """
        results: List[ReconcileResult] = []
        conflicts: List[str] = []

        for target in self.repository.list_targets(namespace):
            try:
                results.append(self.target_reconciler.reconcile(target.namespace, target.name))
            except ConflictError:
                conflicts.append(target.key)

        self.logger.info(
            "Reconciled namespace",
            namespace=namespace or "*",
            targets=len(results) + len(conflicts),
            updated=sum(1 for r in results if r.updated),
            conflicts=len(conflicts),
        )

        if conflicts:
            raise ConflictError(
                f"{len(conflicts)} target(s) changed during reconcile",
                {"namespace": namespace, "targets": conflicts}
            )
        return results
