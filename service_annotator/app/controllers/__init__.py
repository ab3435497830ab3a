"""
Controllers package.

Event handlers that connect the rule store and the annotation reconciler to
the object repository:

- source: Re-parses the policy when the well-known source object changes.
- target: Converges one target object's annotations.
- namespace: Converges every target object in a namespace.
"""

from .namespace import NamespaceReconciler
from .source import SourceReconciler, load_rule_store
from .target import ReconcileResult, TargetReconciler

__all__ = [
    "NamespaceReconciler",
    "SourceReconciler",
    "load_rule_store",
    "ReconcileResult",
    "TargetReconciler",
]
