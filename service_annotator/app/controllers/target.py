"""
Target object controller.
"""

from dataclasses import dataclass
from typing import Optional

from shared.errors import ConflictError, NotFoundError
from shared.logging import get_logger
from ..reconciler.annotations import AnnotationMutation, AnnotationReconciler
from ..repository.base import ObjectRepository
from ..rules.store import RuleStore


@dataclass
class ReconcileResult:
    """Outcome of reconciling one target."""
    namespace: str
    name: str
    found: bool = True
    updated: bool = False
    mutation: Optional[AnnotationMutation] = None


class TargetReconciler:
    """Converges a target object's annotations to the current rule set.

    Every call reads the target fresh. Write conflicts are raised as
    ConflictError; the caller retries by calling ``reconcile`` again.
    """

    def __init__(self, repository: ObjectRepository, rule_store: RuleStore,
                 annotation_reconciler: AnnotationReconciler):
        self.repository = repository
        self.rule_store = rule_store
        self.annotation_reconciler = annotation_reconciler
        self.logger = get_logger("annotator.target_controller")

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        try:
            target = self.repository.get_target(namespace, name)
        except NotFoundError:
            self.logger.debug("Target not found; nothing to reconcile", namespace=namespace, name=name)
            return ReconcileResult(namespace, name, found=False)

        mutation = self.annotation_reconciler.reconcile(
            target.namespace,
            target.name,
            target.annotations,
            self.rule_store.get(),
        )
        if not mutation.changed:
            return ReconcileResult(namespace, name, mutation=mutation)

        updated = target.with_annotations(mutation.apply_to(target.annotations))
        try:
            self.repository.update_target(updated)
        except ConflictError:
            self.logger.info("Target changed during reconcile", namespace=namespace, name=name)
            raise

        self.logger.info(
            "Successfully updated target annotations",
            namespace=namespace,
            name=name,
            removed=sorted(mutation.to_remove),
            applied=sorted(mutation.to_apply),
        )
        return ReconcileResult(namespace, name, updated=True, mutation=mutation)
