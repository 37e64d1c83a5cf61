from pathlib import Path
from typing import Any
import joblib

def atomic_write_joblib(obj: Any, out: Path) -> None:
    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_suffix(out.suffix + ".tmp")
    joblib.dump(obj, tmp)
    tmp.replace(out)             # atomic replace on same filesystem
