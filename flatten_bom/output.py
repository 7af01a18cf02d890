"""Idempotent output of generated files."""

from enum import Enum
from pathlib import Path

from .exceptions import ConfigurationError, FileProcessingError
from .logging_config import logger


class InstallFlavor(str, Enum):
    """Which flavor of the BOM gets installed."""

    FULL = "FULL"
    REDUCED = "REDUCED"
    REDUCED_VERBOSE = "REDUCED_VERBOSE"
    ORIGINAL = "ORIGINAL"

    @classmethod
    def of(cls, value: "str | InstallFlavor") -> "InstallFlavor":
        if isinstance(value, InstallFlavor):
            return value
        try:
            return cls(value.strip().upper().replace("-", "_"))
        except ValueError:
            valid = ", ".join(f.value for f in cls)
            raise ConfigurationError(f"Invalid install flavor '{value}'. Valid values: {valid}") from None


def read_text_or_empty(path: Path, encoding: str = "utf-8") -> str:
    """Read a file, treating a missing file as empty."""
    if not path.exists():
        return ""
    try:
        return path.read_text(encoding=encoding)
    except OSError as e:
        raise FileProcessingError(f"Could not read {path}: {e}") from e


def write_if_changed(path: Path, content: str, encoding: str = "utf-8") -> bool:
    """Write ``content`` to ``path`` unless the file already holds exactly that.

    Parent directories are created as needed.

    Returns:
        True if the file was written.

    Raises:
        FileProcessingError: If the file cannot be read or written
    """
    path = Path(path)
    if read_text_or_empty(path, encoding) == content:
        logger.debug(f"{path} is up to date")
        return False
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding=encoding, newline="\n") as f:
            f.write(content)
    except OSError as e:
        raise FileProcessingError(f"Could not write {path}: {e}") from e
    logger.info(f"Updated {path}")
    return True
