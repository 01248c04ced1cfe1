from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
import shutil
import uuid

TMP_ROOT = Path("tests/tmp")


@contextmanager
def managed_temp_dir(prefix: str, root: str | Path = TMP_ROOT) -> Iterator[Path]:
    tmp_path = Path(root) / f"{prefix}_{uuid.uuid4().hex}"
    tmp_path.mkdir(parents=True, exist_ok=True)
    try:
        yield tmp_path
    finally:
        shutil.rmtree(tmp_path, ignore_errors=True)


@contextmanager
def temp_state_db(prefix: str) -> Iterator[Path]:
    """Path to a fresh router state database inside a managed temp dir."""
    with managed_temp_dir(prefix) as tmp:
        yield tmp / "router_state.db"
