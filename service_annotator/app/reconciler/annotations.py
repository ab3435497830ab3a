"""
Annotation diff/converge engine.
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional

from shared.config import DEFAULT_PROVENANCE_KEY
from shared.errors import EncodeError, ProvenanceDecodeError
from shared.logging import get_logger
from ..rules.models import RuleSet


def encode_provenance(expected: Mapping[str, str]) -> str:
    """Encode the expected annotations as a compact, key-sorted JSON object."""
    try:
        return json.dumps(dict(expected), sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise EncodeError(f"failed to encode provenance marker: {e}", {"error": str(e)}) from e


def decode_provenance(value: Optional[str]) -> Dict[str, str]:
    """Decode a provenance marker into a mapping.

    Raises ProvenanceDecodeError when the value is not a JSON object of
    strings. A missing marker decodes to an empty mapping.
    """
    if value is None:
        return {}
    try:
        decoded = json.loads(value)
    except ValueError as e:
        raise ProvenanceDecodeError(f"invalid provenance JSON: {e}", {"value": value}) from e

    if not isinstance(decoded, dict):
        raise ProvenanceDecodeError("provenance marker is not a JSON object", {"value": value})
    for key, item in decoded.items():
        if not isinstance(item, str):
            raise ProvenanceDecodeError(
                "provenance marker values must be strings",
                {"value": value, "key": key}
            )
    return decoded


@dataclass(frozen=True)
class AnnotationMutation:
    """Result of reconciling one target."""
    to_remove: FrozenSet[str] = frozenset()
    to_apply: Mapping[str, str] = field(default_factory=dict)
    expected: Mapping[str, str] = field(default_factory=dict)
    provenance: Optional[str] = None
    provenance_key: str = DEFAULT_PROVENANCE_KEY

    def __post_init__(self):
        object.__setattr__(self, "to_remove", frozenset(self.to_remove))
        object.__setattr__(self, "to_apply", MappingProxyType(dict(self.to_apply)))
        object.__setattr__(self, "expected", MappingProxyType(dict(self.expected)))

    @property
    def changed(self) -> bool:
        return bool(self.to_remove or self.to_apply)

    def apply_to(self, annotations: Optional[Mapping[str, str]]) -> Dict[str, str]:
        """Return ``annotations`` with the mutation applied.

        The input is not modified. A mutation without changes returns an
        unchanged copy.
        """
        updated = dict(annotations or {})
        if not self.changed:
            return updated
        for key in self.to_remove:
            updated.pop(key, None)
        updated.update(self.to_apply)
        updated[self.provenance_key] = self.provenance
        return updated


class AnnotationReconciler:
    """Stateless annotation reconciler."""

    def __init__(self, provenance_key: str = DEFAULT_PROVENANCE_KEY):
        self.provenance_key = provenance_key
        self.logger = get_logger("annotator.annotation_reconciler")

    def reconcile(
        self,
        namespace: str,
        name: str,
        current_annotations: Optional[Mapping[str, str]],
        rule_set: RuleSet,
    ) -> AnnotationMutation:
        """Compute the mutation that converges ``namespace/name``."""
        current = dict(current_annotations or {})

        expected = self._expected_annotations(namespace, name, rule_set)
        managed = self._read_provenance(namespace, name, current)

        to_remove = frozenset(
            key for key, value in managed.items()
            if key != self.provenance_key
            and key in current
            and current[key] == value
            and key not in expected
        )
        to_apply = {
            key: value for key, value in expected.items()
            if current.get(key) != value
        }

        if not to_remove and not to_apply:
            self.logger.debug("Annotations converged", namespace=namespace, name=name)
            return AnnotationMutation(expected=expected, provenance_key=self.provenance_key)

        provenance = encode_provenance(expected)

        self.logger.debug(
            "Annotation mutation computed",
            namespace=namespace,
            name=name,
            remove=sorted(to_remove),
            apply=sorted(to_apply),
        )
        return AnnotationMutation(
            to_remove=to_remove,
            to_apply=to_apply,
            expected=expected,
            provenance=provenance,
            provenance_key=self.provenance_key,
        )

    def _expected_annotations(self, namespace: str, name: str, rule_set: RuleSet) -> Dict[str, str]:
        expected: Dict[str, str] = {}
        for rule in rule_set.matching(namespace, name):
            for key, value in rule.annotations.items():
                if key == self.provenance_key:
                    self.logger.warning(
                        "Rule sets reserved provenance key; ignoring",
                        rule=rule.name,
                        key=key
                    )
                    continue
                expected[key] = value
        return expected

    def _read_provenance(self, namespace: str, name: str, current: Mapping[str, str]) -> Dict[str, str]:
        try:
            return decode_provenance(current.get(self.provenance_key))
        except ProvenanceDecodeError as e:
            self.logger.warning(
                "Ignoring undecodable provenance marker",
                namespace=namespace,
                name=name,
                error=e.message
            )
            return {}
