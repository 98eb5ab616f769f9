# src/auditor/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Optional, Set

from .core import AnalyzerDefinition

logger = logging.getLogger(__name__)


class AnalyzerRegistry:
    """
    Central registry for analyzers.

    Dynamically discovers AnalyzerDefinition modules from the 'auditor.rules'
    package. Registry order is the sorted module name order, which fixes the
    order in which analyzer results are concatenated.
    """

    _analyzers: Dict[str, AnalyzerDefinition] = {}
    _all_codes: Set[str] = set()
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Discovers and registers all analyzer definitions found in the 'auditor.rules' package.

        A module is registered when it exposes a `DEFINITION` attribute that is an
        `AnalyzerDefinition`. A module that fails to import is logged and skipped.
        """
        if cls._loaded:
            return

        try:
            import auditor.rules as rules_pkg

            for _, name, _ in sorted(pkgutil.iter_modules(rules_pkg.__path__), key=lambda m: m[1]):
                full_name = f"auditor.rules.{name}"
                try:
                    module = importlib.import_module(full_name)
                    if hasattr(module, "DEFINITION") and isinstance(module.DEFINITION, AnalyzerDefinition):
                        cls.register(module.DEFINITION)
                except Exception as e:
                    logger.error(f"Error loading analyzer module {name}: {e}")

            cls._loaded = True
        except ImportError as e:
            logger.error(f"Could not find rules package: {e}")

    @classmethod
    def register(cls, definition: AnalyzerDefinition) -> None:
        if definition.name in cls._analyzers:
            logger.warning(f"Analyzer '{definition.name}' registered twice; keeping the first")
            return
        cls._analyzers[definition.name] = definition
        cls._all_codes.update(definition.codes)
        logger.debug(f"Analyzer loaded: {definition.name}")

    @classmethod
    def get(cls, name: str) -> Optional[AnalyzerDefinition]:
        return cls._analyzers.get(name)

    @classmethod
    def get_all_analyzers(cls) -> List[AnalyzerDefinition]:
        """Returns all registered analyzers in registry order."""
        return list(cls._analyzers.values())

    @classmethod
    def get_all_possible_codes(cls) -> List[str]:
        """Returns a list of all unique issue codes registered in the system."""
        return sorted(list(cls._all_codes))

    @classmethod
    def reset(cls) -> None:
        cls._analyzers = {}
        cls._all_codes = set()
        cls._loaded = False
