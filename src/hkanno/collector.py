from __future__ import annotations

import logging
import os
from typing import Iterable, List

from .codec import SUPPORTED_EXTENSIONS
from .errors import CollectError

logger = logging.getLogger(__name__)


def is_hkx(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in SUPPORTED_EXTENSIONS


def _collect_from_path(path: str, files: List[str], errors: List[str]) -> None:
    if not os.path.exists(path):
        errors.append(f"Path does not exist: {path}")
        return
    if os.path.isfile(path):
        if is_hkx(path):
            files.append(path)
        return

    def on_error(exc: OSError) -> None:
        errors.append(f"Failed to read directory {exc.filename}: {exc}")

    for root, _dirs, names in os.walk(path, onerror=on_error):
        for name in names:
            if is_hkx(name):
                files.append(os.path.join(root, name))


def collect_hkx_files(input_paths: Iterable[str]) -> List[str]:
    """Collect all ``.hkx``/``.xml`` files under the given files or directories, sorted and deduplicated."""
    files: List[str] = []
    errors: List[str] = []
    for path in input_paths:
        _collect_from_path(os.fspath(path), files, errors)

    if errors:
        err = CollectError(errors)
        logger.error("%s", err)
        raise err
    return sorted(set(files))
