from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .codec import HkxCodec
from .collector import collect_hkx_files
from .editor import apply_hkanno, read_hkanno
from .errors import BatchError, HkxFileError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationFile:
    # Original packfile path
    hkx_path: str
    # Where the annotation text is kept (same dir as the packfile)
    anno_path: str
    # File name shown to the user
    display_name: str
    content: str


class _Counter:
    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def _describe(path: str, exc: Exception) -> str:
    if isinstance(exc, HkxFileError):
        return str(exc)
    return str(HkxFileError(path, exc))


def _dump_one(hkx_path: str, codec: Optional[HkxCodec]) -> AnnotationFile:
    content = read_hkanno(hkx_path, codec=codec)
    return AnnotationFile(
        hkx_path=hkx_path,
        anno_path=os.path.splitext(hkx_path)[0] + ".txt",
        display_name=os.path.basename(hkx_path) or "unknown.hkx",
        content=content,
    )


def dump_annotations(
    input_paths: Iterable[str],
    *,
    max_workers: Optional[int] = None,
    codec: Optional[HkxCodec] = None,
) -> List[AnnotationFile]:
    """
    Read annotations from every packfile under ``input_paths``.

    Files without an animation are common in a user-picked directory, so
    failures are only logged as long as at least one file succeeds. A
    ``BatchError`` is raised only when every file failed.
    """
    hkx_files = collect_hkx_files(input_paths)

    annotation_files: List[AnnotationFile] = []
    errors: List[str] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_map = {executor.submit(_dump_one, path, codec): path for path in hkx_files}
        for future in as_completed(future_map):
            try:
                annotation_files.append(future.result())
            except Exception as exc:  # noqa: BLE001
                errors.append(_describe(future_map[future], exc))

    if errors:
        logger.error("Errors during dump:\n%s", "\n".join(errors))
    if not annotation_files and errors:
        raise BatchError(errors)
    logger.info("dumped %d of %d file(s)", len(annotation_files), len(hkx_files))
    return annotation_files


def output_path_for(hkx_path: str, format: str) -> str:
    ext = ".xml" if format.lower() == "xml" else ".hkx"
    return os.path.splitext(hkx_path)[0] + ext


def _update_one(file: AnnotationFile, format: str, codec: Optional[HkxCodec], counter: _Counter) -> None:
    apply_hkanno(file.hkx_path, output_path_for(file.hkx_path, format), file.content, format, codec=codec)
    counter.increment()


def update_annotations(
    files: Iterable[AnnotationFile],
    format: str,
    *,
    max_workers: Optional[int] = None,
    codec: Optional[HkxCodec] = None,
) -> str:
    """
    Write each file's edited annotation text back to its packfile.

    Any failure fails the whole call, but files already written stay written.
    """
    counter = _Counter()
    errors: List[str] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_map = {executor.submit(_update_one, file, format, codec, counter): file for file in files}
        for future in as_completed(future_map):
            try:
                future.result()
            except Exception as exc:  # noqa: BLE001
                errors.append(_describe(future_map[future].hkx_path, exc))

    if errors:
        logger.error("Errors during update annotations:\n%s", "\n".join(errors))
        raise BatchError(errors)
    return f"Updated {counter.value} file(s)"
