from pathlib import Path
from typing import Any, List
import joblib

def _ensure_exists(path: Path):
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"file not found: {p}")

def read_lines(path: Path) -> List[str]:
    """Non-empty, stripped lines of a text file (lines starting with # are skipped)."""
    _ensure_exists(path)
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip() and not line.lstrip().startswith("#")]

def read_joblib(path: Path) -> Any:
    _ensure_exists(path)
    return joblib.load(path)
