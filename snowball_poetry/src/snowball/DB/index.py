from __future__ import annotations
import logging
import os
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Tuple

from ..loader import Corpus, load_corpus
from ..models import BACKWARD, FORWARD, CorpusSource, ExclusionFilter, WordKey

log = logging.getLogger(__name__)

VERBOSE = os.environ.get("SNOWBALL_VERBOSE") == "1" # Progress logging (set SNOWBALL_VERBOSE=1 to enable)

Bucket = Mapping[int, Tuple[str, ...]]
_EMPTY: Dict[int, Tuple[str, ...]] = {}


class TransitionIndex:
    """
    Forward/backward transition tables plus the words-by-length index.

      forward  : key (all but the last word of a run)  -> group id -> last words
      backward : key (all but the first word of a run) -> group id -> first words
      lengths  : word length -> sorted unique words

    Candidate tuples keep raw corpus frequency: a word seen three times after
    a key is three times as likely to be drawn. Built once, then frozen; the
    generator only reads it, so one instance can be shared between threads.
    """
    def __init__(self) -> None:
        self.forward: Dict[WordKey, Dict[int, Tuple[str, ...]]] = {}
        self.backward: Dict[WordKey, Dict[int, Tuple[str, ...]]] = {}
        self.lengths: Dict[int, Tuple[str, ...]] = {}
        self.weights: Dict[int, int] = {0: 1}
        self._frozen: bool = False

    # ---- Build (offline) ----
    @classmethod
    def from_sources(cls, sources: Iterable[CorpusSource]) -> "TransitionIndex":
        idx = cls()
        idx.build(load_corpus(sources))
        return idx

    def build(self, corpus: Corpus) -> None:
        if self._frozen:
            raise RuntimeError("TransitionIndex is frozen; cannot rebuild")

        fwd: Dict[WordKey, Dict[int, List[str]]] = defaultdict(lambda: defaultdict(list))
        bwd: Dict[WordKey, Dict[int, List[str]]] = defaultdict(lambda: defaultdict(list))
        lengths: Dict[int, set] = defaultdict(set)

        for gid, rec in corpus.records:
            for w in rec.words:
                lengths[len(w)].add(w)
            for run in rec.runs(min_words=2):
                fwd[run.forward_key][gid].append(run.last)
                bwd[run.backward_key][gid].append(run.first)

        self.forward = {k: {g: tuple(ws) for g, ws in by_gid.items()} for k, by_gid in fwd.items()}
        self.backward = {k: {g: tuple(ws) for g, ws in by_gid.items()} for k, by_gid in bwd.items()}
        self.lengths = {n: tuple(sorted(ws)) for n, ws in sorted(lengths.items())}
        self.weights = dict(corpus.weights) or {0: 1}
        self._frozen = True

        if VERBOSE:
            print(f"[indexing done] forward={len(self.forward):,} backward={len(self.backward):,}")
        log.info("Built transition index: %s", self.stats())

    # ---- Query ----
    @property
    def weighted(self) -> bool:
        return len(self.weights) > 1

    def table(self, direction: str) -> Dict[WordKey, Dict[int, Tuple[str, ...]]]:
        if direction == FORWARD:
            return self.forward
        if direction == BACKWARD:
            return self.backward
        raise ValueError(f"unknown direction: {direction!r}")

    def bucket(self, direction: str, key: WordKey) -> Bucket:
        return self.table(direction).get(key, _EMPTY)

    def has_valid(self, direction: str, key: WordKey, word_filter: ExclusionFilter) -> bool:
        """True when at least one candidate after `key` survives the filter."""
        for words in self.bucket(direction, key).values():
            if word_filter.valid_words(words):
                return True
        return False

    def words_of_length(self, n: int) -> Tuple[str, ...]:
        return self.lengths.get(int(n), ())

    def valid_words_of_length(self, n: int, word_filter: ExclusionFilter) -> List[str]:
        return word_filter.valid_words(self.words_of_length(n))

    def dead_branches(self) -> List[str]:
        """Words that can be reached (single-word backward keys) but never continued."""
        out = []
        for key in self.backward:
            if len(key) == 1 and key not in self.forward:
                out.append(key.words[0])
        return sorted(out)

    def snapshot(self) -> dict:
        """Plain, order-insensitive view of the tables (for comparisons and dumps)."""
        def _flat(table):
            return {
                str(k): {g: sorted(ws) for g, ws in by_gid.items()}
                for k, by_gid in table.items()
            }
        return {
            "forward": _flat(self.forward),
            "backward": _flat(self.backward),
            "lengths": {n: list(ws) for n, ws in self.lengths.items()},
            "weights": dict(self.weights),
        }

    def stats(self) -> Dict[str, int]:
        return {
            "forward_keys": len(self.forward),
            "backward_keys": len(self.backward),
            "lengths": len(self.lengths),
            "words": sum(len(ws) for ws in self.lengths.values()),
            "groups": len(self.weights),
        }

    # ---- Pickle ----
    def __getstate__(self):
        if not self._frozen:
            raise RuntimeError("only a built TransitionIndex can be pickled")
        return self.__dict__.copy()

    def __setstate__(self, state):
        self.__dict__.update(state)
