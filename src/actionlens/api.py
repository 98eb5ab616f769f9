# src/actionlens/api.py
"""
Public entry points for hosts (editors, CI jobs, playgrounds).

Hosts hand over the records their front ends produced; everything below this
module works on in-memory models only.
"""
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from tqdm.auto import tqdm

from actionlens.core.managers.config_manager import config_manager
from actionlens.core.utils.configure_logging import configure_logger
from actionlens.core.utils.path_utils import PathUtils
from auditor.controllers.audit_controller import AuditController
from auditor.dom.builder import DocumentBuilder
from auditor.dom.core import AnalysisScope, AuditContext
from auditor.dom.document import DocumentModel
from auditor.dom.qngine import QNGINE
from auditor.managers.audit_ignore_manager import AuditIgnoreManager
from auditor.model import Issue

logger = logging.getLogger(__name__)


def setup_logging() -> logging.Handler:
    """Installs the tqdm-aware log handler using the 'debug' settings."""
    return configure_logger(
        general_level=config_manager.get_nested("debug.level", "WARNING"),
        module_specific_levels=config_manager.get_nested("debug.module_levels", {}),
        silenced_loggers=config_manager.get_nested("debug.silenced_loggers", {}),
    )


def _builder(
        actions: Optional[Iterable[Dict[str, Any]]] = None,
        markup: Optional[Iterable[Dict[str, Any]]] = None,
        styles: Optional[Iterable[Dict[str, Any]]] = None,
        html: Optional[str] = None
) -> DocumentBuilder:
    builder = DocumentBuilder()
    builder.add_action_records(actions or [])
    builder.add_markup_records(markup or [])
    if html:
        builder.add_html_fragment(html)
    builder.add_style_records(styles or [])
    return builder


def build_document(
        actions: Optional[Iterable[Dict[str, Any]]] = None,
        markup: Optional[Iterable[Dict[str, Any]]] = None,
        styles: Optional[Iterable[Dict[str, Any]]] = None,
        html: Optional[str] = None
) -> DocumentModel:
    """Validates the raw records and merges them into one DocumentModel."""
    return _builder(actions, markup, styles, html).build()


def analyze(context: AuditContext, engine: Optional[QNGINE] = None) -> List[Issue]:
    """Runs every enabled analyzer against the context."""
    return (engine or QNGINE()).run_audit(context)


def analyze_records(
        actions: Optional[Iterable[Dict[str, Any]]] = None,
        markup: Optional[Iterable[Dict[str, Any]]] = None,
        styles: Optional[Iterable[Dict[str, Any]]] = None,
        html: Optional[str] = None,
        scope: Optional[AnalysisScope] = None
) -> List[Issue]:
    """
    One-shot convenience: load, merge and analyze. Without markup the run is
    file scoped and findings carry LOW confidence.
    """
    context = _builder(actions, markup, styles, html).build_context(scope)
    return analyze(context)


def audit_batch(
        documents: Iterable[Dict[str, Any]],
        project: str = "default",
        workers: Optional[int] = None,
        cache_dir: Optional[Path] = None,
        show_progress: bool = True
) -> AuditController:
    """Audits many documents with a progress bar; returns the controller holding the results."""
    documents = list(documents)
    ignore_manager = AuditIgnoreManager(project, cache_dir or PathUtils.get_cache_root())
    controller = AuditController(project, ignore_manager)

    pbar = tqdm(total=len(documents), desc="Auditing", unit="doc", disable=not show_progress)

    def progress_update(current, total):
        pbar.n = current
        pbar.refresh()

    start_audit = time.perf_counter()
    try:
        summary = controller.run_audit(documents, workers=workers, progress_callback=progress_update)
    finally:
        pbar.close()
    summary["duration"] = time.perf_counter() - start_audit
    logger.info(f"Batch audit for '{project}' took {summary['duration']:.2f}s")
    return controller
