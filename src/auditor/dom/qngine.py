# src/auditor/dom/qngine.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

from actionlens.core.managers.config_manager import config_manager
from auditor.model import Issue
from .core import AnalyzerDefinition, AuditContext, IssueFactory
from .registry import AnalyzerRegistry

logger = logging.getLogger(__name__)


class QNGINE:
    """
    Quality Engine (QNGINE) for auditing UI action documents.

    It runs every registered analyzer against one read-only AuditContext.
    Analyzers run concurrently, each into its own result list; the lists are
    concatenated in registry order once all analyzers have finished, so the
    output sequence is deterministic. An analyzer that raises is logged and
    contributes no issues.
    """

    def __init__(
            self,
            analyzers: Optional[Iterable[AnalyzerDefinition]] = None,
            factory: Optional[IssueFactory] = None,
            max_workers: Optional[int] = None,
            parallel: Optional[bool] = None
    ):
        """Initializes the engine by discovering and loading all available analyzers."""
        if analyzers is None:
            AnalyzerRegistry.discover()
            analyzers = AnalyzerRegistry.get_all_analyzers()

        disabled = set(config_manager.get_nested("analyzers.disabled", []) or [])
        self.analyzers: List[AnalyzerDefinition] = [a for a in analyzers if a.name not in disabled]
        for name in sorted(disabled):
            logger.debug(f"Analyzer disabled by configuration: {name}")

        self.factory = factory or IssueFactory()
        self.max_workers = max_workers or config_manager.get_nested("engine.max_workers", 4)
        self.parallel = parallel if parallel is not None else config_manager.get_nested("engine.parallel", True)

    def _run_analyzer(self, analyzer: AnalyzerDefinition, context: AuditContext) -> List[Issue]:
        try:
            return list(analyzer.analyze(context, self.factory))
        except Exception as e:
            logger.error(f"Analyzer '{analyzer.name}' failed: {e}", exc_info=True)
            return []

    def run_audit(self, context: AuditContext) -> List[Issue]:
        """
        Runs the full analyzer suite on one context.

        Args:
            context (AuditContext): Document model and/or action model plus scope.

        Returns:
            List[Issue]: All findings, grouped by analyzer in registry order.
        """
        if self.parallel and len(self.analyzers) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(self._run_analyzer, a, context) for a in self.analyzers]
                results = [f.result() for f in futures]
        else:
            results = [self._run_analyzer(a, context) for a in self.analyzers]

        findings = [issue for batch in results for issue in batch]
        logger.debug(f"QNGINE produced {len(findings)} issue(s) from {len(self.analyzers)} analyzer(s)")
        return findings
