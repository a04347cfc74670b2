from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import ENCODING
from .errors import ConfigurationError
from .models import CorpusSource, SeedPhrase, WordKey
from .normalize import is_corpus_word, is_snowball, split_words

log = logging.getLogger(__name__)

# Progress logging (set SNOWBALL_VERBOSE=1 to enable)
VERBOSE = os.environ.get("SNOWBALL_VERBOSE") == "1"
PROGRESS_EVERY_RECORDS = 100_000


@dataclass(frozen=True)
class CorpusRecord:
    """One corpus line: a chain of words, each one letter longer than the last."""
    words: Tuple[str, ...]

    @property
    def first(self) -> str:
        return self.words[0]

    @property
    def last(self) -> str:
        return self.words[-1]

    @property
    def forward_key(self) -> WordKey:
        return WordKey(self.words[:-1])

    @property
    def backward_key(self) -> WordKey:
        return WordKey(self.words[1:])

    def runs(self, min_words: int = 1) -> Iterator["CorpusRecord"]:
        """Every contiguous sub-run of the chain with at least `min_words` words."""
        n = len(self.words)
        for i in range(n):
            for j in range(i + min_words, n + 1):
                yield CorpusRecord(self.words[i:j])


@dataclass
class Corpus:
    """
    Parsed corpus sources.

    records : (group_id, record) pairs, in file order
    weights : group_id -> weight. Sources sharing a weight share a group;
              when every source has the same weight there is only group 0.
    """
    records: List[Tuple[int, CorpusRecord]] = field(default_factory=list)
    weights: Dict[int, int] = field(default_factory=dict)

    @property
    def weighted(self) -> bool:
        return len(self.weights) > 1


def parse_record(line: str) -> Optional[CorpusRecord]:
    """
    Parse one corpus line. Blank lines give None; a line that is not a
    lowercase snowball chain raises ValueError.
    """
    words = split_words(line)
    if not words:
        return None
    bad = [w for w in words if not is_corpus_word(w)]
    if bad:
        raise ValueError(f"not a lowercase alphabetic word: {bad[0]!r}")
    if not is_snowball(words):
        raise ValueError("words do not grow by exactly one letter")
    return CorpusRecord(tuple(words))


def iter_records(path: str) -> Iterator[CorpusRecord]:
    try:
        f = open(path, "r", encoding=ENCODING)
    except OSError as exc:
        raise ConfigurationError(f"Cannot open corpus file: {path}") from exc
    with f:
        for line_no, raw in enumerate(f, start=1):
            try:
                rec = parse_record(raw)
            except ValueError as exc:
                log.warning("Skipping %s:%d: %s", path, line_no, exc)
                continue
            if rec is not None:
                yield rec


def group_sources(sources: Sequence[CorpusSource]) -> Tuple[List[int], Dict[int, int]]:
    """
    Map each source to a group id. Heaviest weight gets group 0.
    Returns (group id per source, group id -> weight).
    """
    distinct = sorted({int(s.weight) for s in sources}, reverse=True)
    if len(distinct) <= 1:
        return [0] * len(sources), {0: distinct[0] if distinct else 1}
    gid_of = {w: i for i, w in enumerate(distinct)}
    return [gid_of[int(s.weight)] for s in sources], {i: w for w, i in gid_of.items()}


def load_corpus(sources: Iterable[CorpusSource]) -> Corpus:
    """
    Read every source into a Corpus. Any source that cannot be opened fails
    the whole load.
    """
    sources = list(sources)
    if not sources:
        raise ConfigurationError("at least one corpus source is required")

    group_ids, weights = group_sources(sources)
    corpus = Corpus(weights=weights)
    for src, gid in zip(sources, group_ids):
        n_before = len(corpus.records)
        for rec in iter_records(src.path):
            corpus.records.append((gid, rec))
            if VERBOSE and len(corpus.records) % PROGRESS_EVERY_RECORDS == 0:
                print(f"[loaded] records={len(corpus.records):,}")
        log.info("Loaded %d records from %s (weight=%d)",
                 len(corpus.records) - n_before, src.path, src.weight)
    return corpus


# ---- seed phrases ----

def split_seed_phrases(text: str, delim: str = "\n") -> List[SeedPhrase]:
    out: List[SeedPhrase] = []
    for chunk in text.split(delim):
        seed = SeedPhrase.parse(chunk.replace("\n", " "))
        if seed is not None:
            out.append(seed)
    return out


def load_seed_phrases(path: str) -> List[SeedPhrase]:
    try:
        with open(path, "r", encoding=ENCODING) as f:
            text = f.read()
    except OSError as exc:
        raise ConfigurationError(f"Seed phrase file not found: {path}") from exc
    return split_seed_phrases(text, "\n")
