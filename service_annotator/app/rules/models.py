"""
Rule data models for the annotator.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.errors import ValidationError
from .matcher import match, validate_pattern


class RuleSpec(BaseModel):
    """Raw rule record as it appears in the policy text."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    namespace: str = Field(..., description="Namespace pattern")
    name: str = Field("", description="Name pattern; empty matches any name")
    ingress: str = Field("", description="Alias of name")
    annotations: Dict[str, str] = Field(default_factory=dict, description="Annotations to apply")

    @field_validator("annotations")
    @classmethod
    def check_annotation_keys(cls, value: Dict[str, str]) -> Dict[str, str]:
        if any(key == "" for key in value):
            raise ValueError("annotation keys must not be empty")
        return value

    @model_validator(mode="after")
    def check_name_alias(self) -> "RuleSpec":
        if self.name and self.ingress and self.name != self.ingress:
            raise ValueError("'name' and 'ingress' are aliases and must not differ")
        return self

    @property
    def name_pattern(self) -> str:
        return self.name or self.ingress


@dataclass(frozen=True)
class Rule:
    """Annotation rule."""
    name: str
    namespace_pattern: str
    name_pattern: str = ""
    annotations: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze a private copy so the rule cannot change under a snapshot
        object.__setattr__(self, "annotations", MappingProxyType(dict(self.annotations)))

    @classmethod
    def from_spec(cls, rule_name: str, spec: RuleSpec) -> "Rule":
        return cls(
            name=rule_name,
            namespace_pattern=spec.namespace,
            name_pattern=spec.name_pattern,
            annotations=spec.annotations,
        )

    def matches(self, namespace: str, name: str) -> bool:
        """Check whether the rule applies to the object ``namespace/name``."""
        if not match(self.namespace_pattern, namespace):
            return False
        return self.name_pattern == "" or match(self.name_pattern, name)

    def validate(self) -> None:
        """Validate both patterns against the rule grammar."""
        for field_name, pattern in (("namespace", self.namespace_pattern),
                                    ("name", self.name_pattern)):
            if not validate_pattern(pattern):
                raise ValidationError(
                    f"rule '{self.name}': invalid {field_name} pattern: {pattern}",
                    {"rule": self.name, "field": field_name, "pattern": pattern}
                )
        for key in self.annotations:
            if not key:
                raise ValidationError(
                    f"rule '{self.name}': annotation keys must not be empty",
                    {"rule": self.name, "field": "annotations"}
                )


class RuleSet:
    """Validated, immutable collection of rules ordered by rule name.

    Every rule is validated on construction; a single invalid rule rejects
    the whole set. Iteration follows rule-name order, which is also the
    order in which overlapping annotations are merged (last one wins).
    """

    __slots__ = ("_rules", "_index")

    def __init__(self, rules: Iterable[Rule] = ()):
        ordered: List[Rule] = sorted(rules, key=lambda r: r.name)
        index: Dict[str, Rule] = {}
        for rule in ordered:
            if rule.name in index:
                raise ValidationError(
                    f"duplicate rule name: {rule.name}",
                    {"rule": rule.name, "field": "name"}
                )
            rule.validate()
            index[rule.name] = rule
        self._rules: Tuple[Rule, ...] = tuple(ordered)
        self._index: Mapping[str, Rule] = MappingProxyType(index)

    @classmethod
    def empty(cls) -> "RuleSet":
        return cls(())

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_name: object) -> bool:
        return rule_name in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other._rules

    def __repr__(self) -> str:
        return f"RuleSet({list(self.names)!r})"

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(rule.name for rule in self._rules)

    def get(self, rule_name: str) -> Optional[Rule]:
        return self._index.get(rule_name)

    def matching(self, namespace: str, name: str) -> List[Rule]:
        """Rules that apply to ``namespace/name``, in rule-name order."""
        return [rule for rule in self._rules if rule.matches(namespace, name)]
