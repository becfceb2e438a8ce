"""Analyzer registration system.

Analyzers are registered at import time and evaluated in registration order,
which fixes the order evidence appears in a DetectionOutcome.
"""
import logging
from typing import Dict, Type, List, Set

from core.config import DetectionOptions

logger = logging.getLogger(__name__)


class AnalyzerRegistry:
    """Registry for discovering and instantiating detection analyzers."""

    _analyzers: Dict[str, Type] = {}
    _order: List[str] = []  # Preserve registration order

    @classmethod
    def register(cls, name: str):
        """Decorator to register an analyzer class.

        Args:
            name: Unique identifier for the analyzer (e.g., "headers", "html")

        Example:
            @AnalyzerRegistry.register("headers")
            class HeadersAnalyzer:
                def __init__(self, options: DetectionOptions):
                    self.options = options

                def analyze(self, artifacts: ScanArtifacts) -> List[Evidence]:
                    ...
        """
        def decorator(analyzer_class: Type):
            if name in cls._analyzers:
                logger.warning(f"Analyzer '{name}' already registered, overwriting")
            else:
                cls._order.append(name)

            cls._analyzers[name] = analyzer_class
            logger.debug(f"Registered analyzer: {name} -> {analyzer_class.__name__}")
            return analyzer_class
        return decorator

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get names of all registered analyzers in registration order."""
        return cls._order.copy()

    @classmethod
    def instantiate_all(cls, options: DetectionOptions, exclude: Set[str] = None) -> Dict[str, object]:
        """Instantiate registered analyzers with the given options.

        Args:
            options: Detection options (weights) handed to every analyzer
            exclude: Set of analyzer names to skip

        Returns:
            Dictionary mapping analyzer name to analyzer instance, in registration order
        """
        exclude = exclude or set()
        instances = {}

        for name in cls._order:
            if name in exclude:
                logger.info(f"Skipping excluded analyzer: {name}")
                continue

            instances[name] = cls._analyzers[name](options)
            logger.debug(f"Instantiated analyzer: {name}")

        return instances
