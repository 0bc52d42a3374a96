"""Classifier registry for looking up category strategies by name.

The engine is assembled from an ordered list of names (see ``Settings.classifier_order``), so new
category sources are added by registering a class rather than editing the engine.
"""

from typing import ClassVar

from budget_intake.classifiers.base import BaseClassifier


class ClassifierRegistry:
    """Registry for classifier classes."""

    _registry: ClassVar[dict[str, type[BaseClassifier]]] = {}

    @classmethod
    def register(cls, name: str, classifier_cls: type[BaseClassifier]) -> None:
        """Register a classifier class with a given name."""
        cls._registry[name] = classifier_cls

    @classmethod
    def get(cls, name: str) -> type[BaseClassifier]:
        """Retrieve a classifier class by name."""
        return cls._registry[name]

    @classmethod
    def available(cls) -> list[str]:
        """List all available classifier names."""
        return list(cls._registry.keys())
