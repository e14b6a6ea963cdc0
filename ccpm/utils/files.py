import os
from uuid import uuid4

from loguru import logger


def ensure_dir_exists(path: str) -> None:
    dirname = os.path.normpath(path)
    if dirname != ".":
        os.makedirs(dirname, exist_ok=True)


def _ensure_dir_exists_for_file(path: str) -> None:
    ensure_dir_exists(os.path.dirname(path))


def _get_tmp_path(path: str) -> str:
    return f"{path}.{uuid4().hex}.tmp"


def read_text(path: str) -> str:
    """
    Reads a UTF-8 text file without translating line endings.
    """
    with open(path, "r", encoding="utf-8", newline="") as fp:
        return fp.read()


def write_text(path: str, content: str) -> None:
    logger.debug(f"writing to {path}")
    _ensure_dir_exists_for_file(path)
    with open(path, "w", encoding="utf-8", newline="") as fp:
        fp.write(content)


def write_text_atomic(path: str, content: str) -> None:
    """
    Writes the text to a sibling temporary file then moves it over the given path, so readers see either the old or
    the new content but never a partial write.
    """
    tmp_path = _get_tmp_path(path)
    try:
        write_text(tmp_path, content)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass
        raise
