from __future__ import annotations

import os


def read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(content)


def ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)
