"""
Raw text ingestion.

Turns a directory of natural-language text files into a corpus file of
snowball chains, one chain per line:

    "I am the sea, and you are the sky" -> "i am the"

Optional helpers:
    lexicon   : only words listed in it may appear in a chain
    thesaurus : each line is a group of interchangeable words; every line of
                input is expanded into all of its thesaurus variants first

The corpus file keeps repeated chains, so phrases that occur often in the
raw text carry more weight when the transition tables are built.
"""
from __future__ import annotations
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .config import ENCODING, MAX_LINE_CHUNK
from .DB.storage import write_lines
from .errors import ConfigurationError
from .normalize import grows_by_one, normalize_word

log = logging.getLogger(__name__)

# Progress logging (set SNOWBALL_VERBOSE=1 to enable)
VERBOSE = os.environ.get("SNOWBALL_VERBOSE") == "1"
PROGRESS_EVERY_FILES = 100

DEFAULT_EXCLUDES = {".git", ".hg", ".svn", ".idea", ".vscode", "node_modules", "__pycache__"}


# ---- word lists ----

def load_lexicon(path: str) -> Set[str]:
    try:
        with open(path, "r", encoding=ENCODING, errors="ignore") as f:
            return {w.lower() for line in f for w in line.split()}
    except OSError as exc:
        raise ConfigurationError(f"Specified lexicon file not found: {path}") from exc


def load_thesaurus(path: str) -> Dict[str, List[str]]:
    """
    {honor}      -> [honour]
    {honour}     -> [honor]
    {completely} -> [utterly, totally]
    """
    out: Dict[str, List[str]] = {}
    try:
        with open(path, "r", encoding=ENCODING, errors="ignore") as f:
            for line in f:
                group = line.lower().split()
                for i, word in enumerate(group):
                    others = group[i + 1:] + group[:i]
                    if others:
                        out.setdefault(word, []).extend(others)
    except OSError as exc:
        raise ConfigurationError(f"Specified thesaurus file not found: {path}") from exc
    return out


# ---- line processing ----

def expand_line(line: str, thesaurus: Optional[Dict[str, List[str]]] = None) -> List[str]:
    """
    All thesaurus variants of `line`:
      "the colors we view whilst dreaming" ->
        the colors we view whilst dreaming
        the colors we view while dreaming
        the colours we view whilst dreaming
        the colours we view while dreaming
    """
    if not thesaurus:
        return [line]
    phrases: List[List[str]] = [[]]
    for word in line.split():
        alts = thesaurus.get(word, [])
        grown = [p + [word] for p in phrases]
        for alt in alts:
            grown.extend(p + [alt] for p in phrases)
        phrases = grown
    return [" ".join(p) for p in phrases]


def extract_chains(line: str,
                   lexicon: Optional[Set[str]] = None,
                   rejected: Optional[Set[str]] = None) -> List[List[str]]:
    """
    Maximal runs of two or more words in `line` where each word is one
    letter longer than the one before. Anything that is not a plain word
    (or is missing from `lexicon`) breaks the run.
    """
    chains: List[List[str]] = []
    buf: List[str] = []
    prev = ""
    for token in line.split():
        word = normalize_word(token)
        if word and lexicon is not None and word not in lexicon:
            if rejected is not None:
                rejected.add(word)
            word = ""

        if prev and word and grows_by_one(prev, word):
            if not buf:
                buf.append(prev)
            buf.append(word)
        else:
            if len(buf) > 1:
                chains.append(buf)
            buf = []
        prev = word

    if len(buf) > 1:
        chains.append(buf)
    return chains


def _chunks(line: str, size: int = MAX_LINE_CHUNK) -> Iterator[str]:
    # very long lines are cut; a chain crossing a cut is split in two
    for i in range(0, max(len(line), 1), size):
        yield line[i:i + size]


def chains_from_text(text: str,
                     lexicon: Optional[Set[str]] = None,
                     thesaurus: Optional[Dict[str, List[str]]] = None,
                     rejected: Optional[Set[str]] = None) -> List[str]:
    out: List[str] = []
    for raw in text.splitlines():
        for chunk in _chunks(raw.lower()):
            for variant in expand_line(chunk, thesaurus):
                for chain in extract_chains(variant, lexicon, rejected):
                    out.append(" ".join(chain))
    return out


# ---- files ----

def iter_raw_files(directory: str | Path) -> List[str]:
    """Every non-hidden file below `directory`, sorted."""
    root = Path(directory)
    if not root.is_dir():
        raise ConfigurationError(f"Specified input directory not found: {directory}")

    out: List[str] = []
    stack = [root]
    while stack:
        cur = stack.pop()
        try:
            with os.scandir(cur) as it:
                for entry in it:
                    name = entry.name
                    if name.startswith("."):
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        if name.lower() not in DEFAULT_EXCLUDES:
                            stack.append(Path(cur, name))
                    elif entry.is_file(follow_symlinks=False):
                        out.append(str(Path(cur, name)))
        except PermissionError:
            continue
    return sorted(out)


def _read_text(path: str) -> Tuple[str, str]:
    with open(path, "rb") as f:
        raw = f.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = raw.decode("latin-1", errors="ignore")
    return path, text


def preprocess_directory(directory: str | Path,
                         out_path: str,
                         *,
                         lexicon: Optional[Set[str]] = None,
                         thesaurus: Optional[Dict[str, List[str]]] = None,
                         not_in_lexicon_out: Optional[str] = None,
                         workers: Optional[int] = None) -> int:
    """
    Scan `directory`, write the snowball chains found to `out_path` (sorted,
    one per line) and return how many were written.
    """
    files = iter_raw_files(directory)
    log.info("Preprocessing %d raw files from %s", len(files), directory)

    if workers is None:
        workers = (os.cpu_count() or 4) * 2

    rejected: Set[str] = set()
    lines: List[str] = []
    with ThreadPoolExecutor(max_workers=max(1, workers)) as ex:
        for n, (path, text) in enumerate(ex.map(_read_text, files), start=1):
            found = chains_from_text(text, lexicon, thesaurus, rejected)
            lines.extend(found)
            log.debug("%s: %d chains", path, len(found))
            if VERBOSE and n % PROGRESS_EVERY_FILES == 0:
                print(f"[scanned] files={n:,} chains={len(lines):,}")

    lines.sort()
    write_lines(out_path, lines)
    log.info("Wrote %d chains to %s", len(lines), out_path)

    if not_in_lexicon_out and lexicon is not None:
        write_lines(not_in_lexicon_out, sorted(rejected))
    return len(lines)

