"""
Annotation reconciliation.

Computes the minimal set of annotation additions and removals that converge
a target object to the annotations contributed by the currently matching
rules, using a provenance marker to tell annotator-owned keys apart from
keys set by anyone else.
"""

from .annotations import AnnotationMutation, AnnotationReconciler, decode_provenance, encode_provenance

__all__ = ["AnnotationMutation", "AnnotationReconciler", "decode_provenance", "encode_provenance"]
