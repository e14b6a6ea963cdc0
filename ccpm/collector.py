import os
from pathlib import PurePath
from typing import Dict, List, Optional

from loguru import logger

from ccpm.errors import SourcePathError, SourceReadError, TransformError
from ccpm.models.package import SourceFile
from ccpm.models.transform import BaseTransform
from ccpm.utils.files import read_text


def _relative_key(path: str, root: str) -> str:
    try:
        relpath = PurePath(path).relative_to(root)
    except ValueError as exc:
        raise SourcePathError(f"invalid source path: {exc}") from exc
    return relpath.as_posix()


def collect_sources(source_root: str, transform: Optional[BaseTransform] = None) -> Dict[str, SourceFile]:
    """
    Reads every file below the source root, keyed by its posix path relative to the root.

    Directories are walked depth-first using an explicit stack. When a transform is given, each file's text is passed
    through it and the digest is computed over the transformed text.

    :raises SourceReadError: If the root or any directory or file below it cannot be read.
    :raises SourcePathError: If a file's path cannot be expressed relative to the root.
    :raises TransformError: If the transform rejects a file.
    """
    if not os.path.isdir(source_root):
        raise SourceReadError(f"unable to read source directory: {source_root} is not a directory")

    files: Dict[str, SourceFile] = {}
    stack: List[str] = [source_root]
    while stack:
        path = stack.pop()
        if os.path.isdir(path):
            try:
                with os.scandir(path) as entries:
                    stack.extend(entry.path for entry in entries)
            except OSError as exc:
                raise SourceReadError(f"unable to read source directory: {exc}") from exc
            continue

        if not os.path.isfile(path):
            logger.debug(f"skipping non-regular entry {path}")
            continue

        key = _relative_key(path, source_root)
        logger.trace(f"reading source {key}")
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(f"unable to read source file {key}: {exc}") from exc

        if transform is not None:
            try:
                content = transform(content)
            except TransformError as exc:
                raise TransformError(f"unable to {transform.name or 'transform'} source file {key}: {exc}") from exc

        files[key] = SourceFile.from_content(content)

    return files
