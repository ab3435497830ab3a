"""
Source object controller.
"""

from shared.config import AnnotatorConfig
from shared.errors import AnnotatorException, NotFoundError
from shared.logging import get_logger
from ..repository.base import ObjectRepository
from ..repository.models import SourceObject
from ..rules.store import RuleStore


def _policy_text(source: SourceObject, policy_key: str) -> str:
    text = source.policy_text(policy_key)
    if text is None:
        raise NotFoundError("policy", source.namespace, source.name, {"key": policy_key})
    return text


def load_rule_store(repository: ObjectRepository, config: AnnotatorConfig) -> RuleStore:
    """Build the rule store from the well-known source object.

    A missing source object, a missing policy key or an invalid policy are
    hard initialization errors.
    """
    source = repository.get_source(config.source_namespace, config.source_name)
    return RuleStore.from_policy(_policy_text(source, config.policy_key), source=source.key)


class SourceReconciler:
    """Keeps the rule store in sync with the source object."""

    def __init__(self, repository: ObjectRepository, rule_store: RuleStore, config: AnnotatorConfig):
        self.repository = repository
        self.rule_store = rule_store
        self.config = config
        self.logger = get_logger("annotator.source_controller")

    def is_source(self, namespace: str, name: str) -> bool:
        return namespace == self.config.source_namespace and name == self.config.source_name

    def reconcile(self, namespace: str, name: str) -> bool:
        """Handle an event for ``namespace/name``.

        Returns True when a new rule set was published. Events for other
        objects are ignored. Parse and validation errors propagate and the
        previous rule set stays in effect.
        """
        if not self.is_source(namespace, name):
            return False

        self.logger.info("Reconciling source object", namespace=namespace, name=name)
        try:
            source = self.repository.get_source(namespace, name)
            text = _policy_text(source, self.config.policy_key)
        except NotFoundError as e:
            self.logger.warning(
                "Policy source unavailable; keeping current rule set",
                error=e.message,
                revision=self.rule_store.revision
            )
            return False

        try:
            self.rule_store.update(text)
        except AnnotatorException as e:
            self.logger.error("Failed to update rule store", code=e.code, error=e.message)
            raise

        self.logger.info("Successfully reconciled source object", revision=self.rule_store.revision)
        return True
