"""
Annotator service for keeping target annotations in sync with policy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from shared.config import AnnotatorConfig, get_config
from shared.errors import ConflictError
from shared.logging import clear_context, configure_logging, get_logger, set_reconcile_context

from .controllers import NamespaceReconciler, ReconcileResult, SourceReconciler, TargetReconciler, load_rule_store
from .reconciler import AnnotationReconciler
from .repository.base import ObjectRepository


class EventKind(str, Enum):
    """Reconcile event kinds."""
    SOURCE = "source"
    TARGET = "target"
    NAMESPACE = "namespace"


@dataclass(frozen=True)
class ReconcileEvent:
    """Event delivered by the event source."""
    kind: EventKind
    namespace: str
    name: str = ""


class AnnotatorService:
    """Annotator service implementation."""

    def __init__(self, repository: ObjectRepository, config: Optional[AnnotatorConfig] = None,
                 configure_logs: bool = False):
        self.config = config or get_config()
        if configure_logs:
            configure_logging(self.config.service_name, self.config.log_level)
        self.logger = get_logger("annotator.service")
        self.repository = repository

        # Fails when the policy source is missing or invalid
        self.rule_store = load_rule_store(repository, self.config)

        self.annotation_reconciler = AnnotationReconciler(self.config.provenance_key)
        self.source_reconciler = SourceReconciler(repository, self.rule_store, self.config)
        self.target_reconciler = TargetReconciler(repository, self.rule_store, self.annotation_reconciler)
        self.namespace_reconciler = NamespaceReconciler(repository, self.target_reconciler)

        self.logger.info(
            "Annotator initialized",
            source=f"{self.config.source_namespace}/{self.config.source_name}",
            rules=len(self.rule_store.get()),
        )

    def handle_event(self, event: ReconcileEvent) -> List[ReconcileResult]:
        """Dispatch one event.

        A source event that publishes a new rule set triggers a resync of
        every target. Errors propagate to the event source, which owns the
        retry policy.
        """
        set_reconcile_context(event.kind.value, event.namespace, event.name)
        try:
            if event.kind == EventKind.SOURCE:
                if self.source_reconciler.reconcile(event.namespace, event.name):
                    return self.resync()
                return []
            if event.kind == EventKind.TARGET:
                return [self.target_reconciler.reconcile(event.namespace, event.name)]
            if event.kind == EventKind.NAMESPACE:
                return self.namespace_reconciler.reconcile(event.namespace)
            raise ValueError(f"unknown event kind: {event.kind}")
        finally:
            clear_context()

    def resync(self) -> List[ReconcileResult]:
        """Reconcile every target against the current rule set."""
        try:
            return self.namespace_reconciler.reconcile(None)
        except ConflictError as e:
            self.logger.warning("Resync finished with conflicts", targets=e.details.get("targets"))
            raise
