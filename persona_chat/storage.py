# persona_chat/storage.py
import os
import tempfile
from pathlib import Path


def atomic_write_text(path: Path, text: str) -> None:
    """임시 파일에 쓴 뒤 rename - 읽는 쪽은 이전 파일 또는 새 파일만 본다"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
