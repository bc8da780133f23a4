import os
from pathlib import Path
from typing import Iterable, Tuple

ROOT_KEY = "."

def extension_of(file_name: str) -> str:
    # lower-cased extension without the dot; "" for dotfiles and names without one.
    _, ext = os.path.splitext(file_name)
    if len(ext) <= 1:
        return ""
    return ext[1:].lower()

def normalize_extensions(extensions: Iterable[str]) -> Tuple[str, ...]:
    # ".GO", " go" and "go" all become "go"; order of first appearance is kept.
    seen = []
    for raw in extensions:
        ext = str(raw).strip().lstrip(".").lower()
        if ext and ext not in seen:
            seen.append(ext)
    return tuple(seen)

def normalize_rel_key(path_str: str) -> str:
    # canonical rule-store key: forward slashes, no leading "./" or trailing "/", "." for root.
    key = path_str.replace("\\", "/").strip()
    while key.startswith("./"):
        key = key[2:]
    key = key.strip("/")
    return key or ROOT_KEY

def relative_posix(path: Path, root: Path) -> str:
    # slash-normalized path of `path` relative to `root`, "." for the root itself.
    rel = os.path.relpath(path, root)
    if rel == os.curdir:
        return ROOT_KEY
    return Path(rel).as_posix()
