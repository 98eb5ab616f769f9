# src/auditor/controllers/audit_controller.py
import json
import logging
from collections import Counter, defaultdict
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

import pandas as pd

from actionlens.core.managers.config_manager import config_manager
from auditor.dom.builder import DocumentBuilder
from auditor.dom.core import AnalysisScope
from auditor.dom.qngine import QNGINE
from auditor.managers.audit_ignore_manager import AuditIgnoreManager, is_ignored
from auditor.model import Issue

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Document", "Type", "Severity", "Confidence", "Completeness", "WCAG",
    "File", "Line", "Column", "Message", "Fix", "Analyzer",
]


def _records(payload: Dict[str, Any], key: str) -> List[Any]:
    """List valued payload field; DataFrame rows may carry NaN for missing cells."""
    value = payload.get(key)
    return list(value) if isinstance(value, (list, tuple)) else []


def _worker_audit_document(
        payload: Dict[str, Any],
        ignored_types: Set[str],
        ignored_files: Set[str]
) -> Dict[str, Any]:
    """
    Worker function to audit a single document in a separate process.

    The payload carries raw records (actions, markup, styles, optional html)
    so that only plain data crosses the process boundary.
    """
    name = payload.get("name")
    name = name if isinstance(name, str) and name else "document"

    results = {
        "name": name,
        "issues": [],
        "export_rows": [],
        "stats": Counter(),
        "rejected": 0,
    }

    try:
        builder = DocumentBuilder()
        builder.add_action_records(_records(payload, "actions"))
        builder.add_markup_records(_records(payload, "markup"))
        html = payload.get("html")
        if isinstance(html, str) and html:
            builder.add_html_fragment(html, file=f"{name}.html")
        builder.add_style_records(_records(payload, "styles"))

        scope = payload.get("scope")
        context = builder.build_context(AnalysisScope(scope) if isinstance(scope, str) and scope else None)
        findings = QNGINE().run_audit(context)
        results["rejected"] = len(builder.rejected)

        for issue in findings:
            if is_ignored(issue.type, issue.location.file, ignored_types, ignored_files):
                continue

            results["stats"][(issue.analyzer, issue.type)] += 1
            results["issues"].append(issue.model_dump(mode="json"))
            results["export_rows"].append({"Document": name, **issue.to_record()})

        return results

    except Exception as e:
        logger.error(f"Worker failed on {name}: {e}")
        return {"error": str(e), "name": name}


class AuditController:
    """
    Orchestrates batch audits over many documents: parallel execution,
    aggregation of results, tabular export and the JSON summary report.
    """

    def __init__(self, project: str, ignore_manager: Optional[AuditIgnoreManager] = None):
        self.project = project
        self.ignore_manager = ignore_manager

        # Results Buffers
        self.issues: List[Issue] = []
        self.export_rows: List[Dict[str, Any]] = []
        self.stats = defaultdict(Counter)
        self.failed: List[str] = []
        self.summary: Dict[str, Any] = {}

    def run_audit(
            self,
            documents: Union[pd.DataFrame, Iterable[Dict[str, Any]]],
            workers: Optional[int] = None,
            progress_callback=None
    ) -> Dict[str, Any]:
        """
        Audits every document payload and aggregates the findings.

        Args:
            documents: A DataFrame (one row per document) or an iterable of
                payload dicts with the keys name, actions, markup, styles,
                html and scope.
            workers (Optional[int]): Process count; 1 runs inline. Defaults to
                the 'controller.workers' setting.
            progress_callback: Called as progress_callback(done, total).

        Returns:
            Dict[str, Any]: The summary payload.
        """
        if isinstance(documents, pd.DataFrame):
            tasks = documents.to_dict("records")
        else:
            tasks = list(documents)
        total = len(tasks)
        workers = workers or config_manager.get_nested("controller.workers", 1)

        # Reset Buffers
        self.issues = []
        self.export_rows = []
        self.stats = defaultdict(Counter)
        self.failed = []
        documents_with_issues = 0
        rejected = 0

        ign_types = set(self.ignore_manager.ignored_types) if self.ignore_manager else set()
        ign_files = set(self.ignore_manager.ignored_files) if self.ignore_manager else set()

        func = partial(_worker_audit_document, ignored_types=ign_types, ignored_files=ign_files)

        if workers > 1 and total > 1:
            with ProcessPoolExecutor(max_workers=workers) as executor:
                results_iter = list(self._collect(executor.map(func, tasks), total, progress_callback))
        else:
            results_iter = list(self._collect(map(func, tasks), total, progress_callback))

        for result in results_iter:
            if "error" in result:
                self.failed.append(result["name"])
                continue

            rejected += result["rejected"]
            if result["issues"]:
                documents_with_issues += 1
                for (analyzer, issue_type), count in result["stats"].items():
                    self.stats[analyzer][issue_type] += count
                self.export_rows.extend(result["export_rows"])
                for issue_dict in result["issues"]:
                    self.issues.append(Issue.model_validate(issue_dict))

        self.summary = self._generate_summary_report(total, documents_with_issues, rejected)
        logger.info(
            f"Audit of {total} document(s) finished: {len(self.issues)} issue(s), "
            f"{len(self.failed)} failed"
        )
        return self.summary

    @staticmethod
    def _collect(results, total: int, progress_callback):
        for i, result in enumerate(results):
            if progress_callback:
                progress_callback(i + 1, total)
            yield result

    def _generate_summary_report(self, total: int, documents_with_issues: int, rejected: int) -> Dict[str, Any]:
        breakdown_list = [
            {"analyzer": analyzer, "type": issue_type, "count": count}
            for analyzer, types in sorted(self.stats.items())
            for issue_type, count in sorted(types.items())
        ]

        return {
            "project": self.project,
            "summary": {
                "documents_analyzed": total,
                "documents_with_issues": documents_with_issues,
                "documents_failed": len(self.failed),
                "total_issues": len(self.issues),
                "rejected_records": rejected,
            },
            "breakdown": breakdown_list,
        }

    def save_report(self, path: Path) -> Path:
        """Writes the summary payload as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.summary, f, indent=2)
        logger.info(f"Audit summary report saved to {path}")
        return path

    # --- Result Getters ---
    def get_results(self) -> List[Issue]:
        return self.issues

    def get_results_for_export(self) -> List[Dict[str, Any]]:
        return self.export_rows

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.export_rows, columns=EXPORT_COLUMNS)

    def export_csv(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(path, index=False)
        return path
