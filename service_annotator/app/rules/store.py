"""
Rule store for the annotator.

Parses policy text into a RuleSet and publishes the latest valid snapshot.
Updates are all-or-nothing: a policy that fails to parse or validate leaves
the previously published snapshot in effect.
"""

import threading
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from shared.errors import NotFoundError, ParseError, ValidationError
from shared.logging import get_logger
from .models import Rule, RuleSet, RuleSpec


def parse_policy(policy_text: str) -> RuleSet:
    """Parse YAML policy text into a validated RuleSet.

    The document is a mapping from rule name to a record with ``namespace``,
    optional ``name`` (or ``ingress``) and ``annotations``. Scalars keep
    their source text, so ``300`` and ``false`` load as "300" and "false".
    An empty document yields an empty RuleSet.
    """
    try:
        document = yaml.load(policy_text, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise ParseError(f"failed to parse policy YAML: {e}", {"error": str(e)}) from e

    if document is None:
        return RuleSet.empty()
    if not isinstance(document, dict):
        raise ParseError(
            "policy must be a mapping of rule name to rule",
            {"type": type(document).__name__}
        )

    rules: List[Rule] = []
    for rule_name, record in document.items():
        rule_name = str(rule_name)
        if not isinstance(record, dict):
            raise ParseError(
                f"rule '{rule_name}' must be a mapping",
                {"rule": rule_name, "type": type(record).__name__}
            )
        try:
            spec = RuleSpec.model_validate(record)
        except PydanticValidationError as e:
            errors = e.errors(include_url=False)
            fields = [".".join(str(loc) for loc in err["loc"]) for err in errors]
            raise ValidationError(
                f"rule '{rule_name}': invalid fields: {', '.join(f or 'rule' for f in fields)}",
                {"rule": rule_name, "fields": fields, "errors": [err["msg"] for err in errors]}
            ) from e
        rules.append(Rule.from_spec(rule_name, spec))

    return RuleSet(rules)


class RuleStore:
    """Concurrency-safe holder of the published RuleSet snapshot."""

    def __init__(self, initial: Optional[RuleSet] = None):
        self.logger = get_logger("annotator.rule_store")
        self._lock = threading.Lock()
        # Held by writers across parse and swap; readers only take _lock
        self._update_lock = threading.Lock()
        self._rule_set: RuleSet = initial if initial is not None else RuleSet.empty()
        self._revision = 0 if initial is None else 1

    @classmethod
    def from_policy(cls, policy_text: Optional[str], source: str = "policy") -> "RuleStore":
        """Build a store from the current policy text.

        Absent text is a hard initialization error, as is invalid text.
        """
        if policy_text is None:
            raise NotFoundError("policy", "", source)
        store = cls()
        store.update(policy_text)
        return store

    @property
    def revision(self) -> int:
        """Number of snapshots successfully published."""
        with self._lock:
            return self._revision

    def get(self) -> RuleSet:
        """Return the currently published snapshot."""
        with self._lock:
            return self._rule_set

    def update(self, policy_text: str) -> RuleSet:
        """Parse, validate and atomically publish a new snapshot.

        Raises ParseError or ValidationError and keeps the previous snapshot
        when the policy is rejected. Writers are serialized, so snapshots are
        published in the order ``update`` was entered.
        """
        with self._update_lock:
            try:
                rule_set = parse_policy(policy_text)
            except (ParseError, ValidationError) as e:
                self.logger.warning(
                    "Policy update rejected",
                    code=e.code,
                    error=e.message,
                    details=e.details
                )
                raise

            with self._lock:
                self._rule_set = rule_set
                self._revision += 1
                revision = self._revision

        self.logger.info("Rule set published", rules=len(rule_set), revision=revision)
        return rule_set

    def get_store_stats(self) -> Dict[str, Any]:
        """Get store statistics."""
        rule_set = self.get()
        return {
            "revision": self.revision,
            "total_rules": len(rule_set),
            "rules": list(rule_set.names),
        }
