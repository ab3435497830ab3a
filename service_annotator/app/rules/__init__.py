"""
Rules package.

Defines the pattern matcher, the rule model and the concurrency-safe rule
store used by the annotator. Policy text is parsed into a validated,
immutable RuleSet which the store publishes atomically to readers.

Modules of interest:
- matcher: Comma-separated, optionally negated glob matching.
- models: Rule, RuleSet and the raw policy record model.
- store: Parsing, validation and snapshot publication.
"""

from .matcher import match, validate_pattern
from .models import Rule, RuleSet
from .store import RuleStore, parse_policy

__all__ = ["match", "validate_pattern", "Rule", "RuleSet", "RuleStore", "parse_policy"]
