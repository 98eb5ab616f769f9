# src/auditor/managers/audit_ignore_manager.py
import json
import logging
from pathlib import Path
from typing import Iterable, Set

from actionlens.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

IGNORE_KINDS = ("type", "file")


class AuditIgnoreManager:
    """
    Persisted suppression lists for batch audits: issue types that should be
    dropped entirely, and source files whose findings should be dropped.
    """

    def __init__(self, project: str, cache_dir: Path):
        self.project = project
        self.project_dir = PathUtils.get_project_dir(project, Path(cache_dir))

        self.type_ignore_file = self.project_dir / "typeignore.json"
        self.file_ignore_file = self.project_dir / "fileignore.json"

        self.ignored_types: Set[str] = self._load(self.type_ignore_file)
        self.ignored_files: Set[str] = self._load(self.file_ignore_file)

    def _load(self, path: Path) -> Set[str]:
        """Loads a JSON list as a set; unreadable files count as empty."""
        if path.exists():
            try:
                with open(path, 'r') as f:
                    return set(json.load(f))
            except (OSError, ValueError, TypeError) as e:
                logger.warning(f"Could not read ignore file {path}: {e}")
        return set()

    def _save(self, path: Path, data: Set[str]):
        try:
            with open(path, 'w') as f:
                json.dump(sorted(data), f, indent=2)
        except OSError as e:
            logger.error(f"Could not save ignore file {path}: {e}")

    def update_ignore_list(self, kind: str, items: str = None, reset: bool = False) -> bool:
        """
        Adds comma separated items to the 'type' or 'file' list, optionally
        clearing it first. Saves immediately when something changed.
        """
        if kind not in IGNORE_KINDS:
            raise ValueError(f"Unknown ignore list '{kind}', expected one of {IGNORE_KINDS}")

        target_set = self.ignored_types if kind == 'type' else self.ignored_files
        target_file = self.type_ignore_file if kind == 'type' else self.file_ignore_file

        modified = False

        if reset:
            target_set.clear()
            modified = True

        if items:
            new_items = [i.strip() for i in items.split(',') if i.strip()]
            if new_items:
                target_set.update(new_items)
                modified = True

        if modified:
            self._save(target_file, target_set)

        return modified

    def set_ignored_types(self, issue_types: Iterable[str]):
        self.ignored_types = set(issue_types)
        self._save(self.type_ignore_file, self.ignored_types)


def is_ignored(issue_type: str, file: str, ignored_types: Set[str], ignored_files: Set[str]) -> bool:
    """True when the type is suppressed or the file path contains a suppressed fragment."""
    if issue_type in ignored_types:
        return True
    return any(fragment in file for fragment in ignored_files)
