"""
Object repository package.

The annotator reads and writes source and target objects through an
ObjectRepository. The in-memory implementation provides optimistic
concurrency by resource version and is used for embedding and tests.
"""

from .base import ObjectRepository
from .memory import InMemoryObjectRepository
from .models import SourceObject, TargetObject

__all__ = ["ObjectRepository", "InMemoryObjectRepository", "SourceObject", "TargetObject"]
