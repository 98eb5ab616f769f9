# src/actionlens/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important project and user paths.
    """

    @staticmethod
    def get_package_root() -> Path:
        """Directory of the installed 'actionlens' package (holds settings.json)."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_package_root() / "settings.json"

    @staticmethod
    def get_user_config_dir() -> Path:
        """
        Returns the path to the user's .actionlens config directory.
        (e.g., ~/.actionlens/)
        """
        return Path.home() / ".actionlens"

    @staticmethod
    def get_cache_root() -> Path:
        """Root directory for persisted per-project state such as ignore lists."""
        return PathUtils.get_user_config_dir() / "cache"

    @staticmethod
    def get_project_dir(project: str, base_dir: Path = None) -> Path:
        """
        Returns the directory for a specific project.
        Creates the directory if it doesn't exist.
        """
        root = base_dir if base_dir else PathUtils.get_cache_root()
        path = root / str(project)
        path.mkdir(parents=True, exist_ok=True)
        return path
