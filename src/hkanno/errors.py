"""
hkanno error types.

Every failure that can happen while editing one file derives from
HkannoError, so batch callers can label it with the path and move on.
"""

from __future__ import annotations

from typing import List


class HkannoError(Exception):
    """Base exception for all hkanno failures."""


class HkannoIOError(HkannoError):
    """Raised when a file cannot be read or written."""

    def __init__(self, path: str, source: OSError):
        self.path = path
        self.source = source
        super().__init__(f"Failed to Read/Write. path: {path}, err: {source}")


class CodecError(HkannoError):
    """Raised by a codec that cannot turn bytes into a class map or back."""


class HkxCodecError(HkannoError):
    """Codec failure wrapped with the file it happened on."""

    def __init__(self, path: str, source: Exception):
        self.path = path
        self.source = source
        super().__init__(f"internal codec err: path: {path}, err: {source}")


class MissingAnimationClassError(HkannoError):
    def __init__(self):
        super().__init__("No `hkaAnimation`-derived class found")


class MultipleAnimationClassesError(HkannoError):
    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"expected one `hkaAnimation` per `hkx`, but multiple were obtained. Got count: {count}"
        )


class InvalidOutputFormatError(HkannoError):
    def __init__(self, format: str):
        self.format = format
        super().__init__(f"Unsupported output format: {format}. Expected: `amd64`, `win32`, `xml`.")


class HkannoParseError(HkannoError, ValueError):
    """
    Syntax error in hkanno text.

    Only structural problems are reported here (bad numbers, missing text,
    annotations outside a track). Count headers are never checked.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"Parse Error: {self.message}"


class PreviewEncodingError(HkannoError):
    def __init__(self, source: UnicodeDecodeError):
        self.source = source
        super().__init__(f"Serialized preview is not valid UTF-8: {source}")


class HkxFileError(HkannoError):
    """Any of the above, labelled with the file it came from."""

    def __init__(self, path: str, source: Exception):
        self.path = path
        self.source = source
        super().__init__(f"path: {path}, err: {source}")


class ViewReleasedError(HkannoError, RuntimeError):
    def __init__(self):
        super().__init__("hkanno view used after its source text was released")


class CollectError(HkannoError):
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("Multiple errors during file collection:\n" + "\n".join(errors))


class BatchError(HkannoError):
    """Aggregated per-file failures of a batch run."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("\n".join(errors))
