"""Project-file configuration: the `[tool.docbound]` table of pyproject.toml"""

from pathlib import Path
import tomllib
from typing import Any

from docbound.exceptions import ConfigurationError

PYPROJECT = "pyproject.toml"


class ConfigFileError(ConfigurationError):
    """A configuration file exists but cannot be used."""

    def __init__(self, file_path: Path, message: str) -> None:
        self.file_path = file_path
        super().__init__(f"Config file error in {file_path}: {message}")


def find_pyproject(start_dir: Path | None = None) -> Path | None:
    """Nearest pyproject.toml at or above `start_dir` (default: CWD)."""
    start = Path(start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / PYPROJECT
        if candidate.is_file():
            return candidate
    return None


class FileConfigLoader:
    """Reads docbound settings from the project's pyproject.toml."""

    def load_project_config(self, project_root: Path | None = None) -> dict[str, Any]:
        """Return the `[tool.docbound]` table, or `{}` when there is none.

        Raises:
            ConfigFileError: The file is unreadable, is not valid TOML, or
                `tool.docbound` is not a table.
        """
        path = find_pyproject(project_root)
        if path is None:
            return {}

        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(path, f"Failed to parse TOML: {e}") from e

        section = data.get("tool", {}).get("docbound", {})
        if not isinstance(section, dict):
            raise ConfigFileError(path, "[tool.docbound] must be a table")
        return dict(section)
