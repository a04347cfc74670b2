from __future__ import annotations
import os
import pickle
import time
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from ..config import ENCODING, POEM_FILE_PREFIX

# the key/value shape of the transition tables
Table = Mapping[Any, Mapping[int, Tuple[str, ...]]]


def _atomic_path(path: str) -> str:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    return f"{path}.tmp"


def write_lines(path: str, lines: Iterable[str]) -> None:
    tmp = _atomic_path(path)
    with open(tmp, "w", encoding=ENCODING, newline="\n") as f:
        for line in lines:
            f.write(line)
            f.write("\n")
    os.replace(tmp, path)


# ---- index cache ----
def save_index(index: Any, path: str) -> None:
    """Pickle a built TransitionIndex."""
    tmp = _atomic_path(path)
    with open(tmp, "wb") as f:
        pickle.dump(index, f, protocol=pickle.HIGHEST_PROTOCOL)
    os.replace(tmp, path)


def load_index(path: str) -> Any:
    with open(path, "rb") as f:
        return pickle.load(f)


# ---- debug dumps ----
def _values(by_gid: Mapping[int, Tuple[str, ...]], dedupe: bool) -> List[str]:
    words = [w for gid in sorted(by_gid) for w in by_gid[gid]]
    return sorted(set(words)) if dedupe else words


def save_table(table: Table, path: str, *, dedupe: bool = False) -> None:
    """
    One line per key/value pair:
      i am
      i|am him
      i|am the
    """
    lines = []
    for key in sorted(table, key=str):
        for word in _values(table[key], dedupe):
            lines.append(f"{key} {word}")
    write_lines(path, lines)


def save_table_key_header(table: Table, path: str, *, dedupe: bool = False) -> None:
    """
    Key:    i|am
    Values: him
            the
    """
    blocks: Dict[str, List[str]] = {str(k): _values(v, dedupe) for k, v in table.items()}
    write_lines(path, _key_header_lines(blocks))


def save_length_index(lengths: Mapping[int, Tuple[str, ...]], path: str) -> None:
    blocks = {str(n): list(lengths[n]) for n in sorted(lengths)}
    write_lines(path, _key_header_lines(blocks, sort=False))


def _key_header_lines(blocks: Mapping[str, List[str]], sort: bool = True) -> List[str]:
    lines: List[str] = []
    for key in (sorted(blocks) if sort else blocks):
        words = blocks[key]
        lines.append(f"Key:    {key}")
        if not words:
            lines.append("Values:")
        for i, w in enumerate(words):
            lines.append(("Values: " if i == 0 else "        ") + w)
        lines.append("")
    return lines


def save_dead_branches(words: Iterable[str], path: str) -> None:
    write_lines(path, words)


# ---- poems ----
def poem_file_name(seed_phrase: str = "", stamp: int | None = None, copy: int = 0) -> str:
    stamp = int(time.time()) if stamp is None else stamp
    suffix = f"-[{seed_phrase}]" if seed_phrase else ""
    if copy:
        suffix += f"-{copy}"
    return f"{POEM_FILE_PREFIX}{stamp}{suffix}.txt"


def save_poems(poems: Iterable[str], out_dir: str = ".", seed_phrase: str = "",
               stamp: int | None = None) -> str:
    """Write one poem per line to a fresh output file and return its path."""
    stamp = int(time.time()) if stamp is None else stamp
    path = os.path.join(out_dir, poem_file_name(seed_phrase, stamp))
    copy = 1
    # same second, same seed phrase: never overwrite an earlier batch
    while os.path.exists(path):
        copy += 1
        path = os.path.join(out_dir, poem_file_name(seed_phrase, stamp, copy))
    write_lines(path, poems)
    return path
