"""Classifiers package: category strategies, their registry, the vendor table and the rule engine."""

from .base import BaseClassifier, CategorizationRecord  # noqa: F401
from .engine import CategorizationEngine, CategoryMatch, build_engine  # noqa: F401
from .registry import ClassifierRegistry  # noqa: F401
