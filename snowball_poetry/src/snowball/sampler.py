from __future__ import annotations
import random
from typing import List

from .DB.index import TransitionIndex
from .models import ExclusionFilter, WordKey


def candidate_pool(index: TransitionIndex, direction: str, key: WordKey,
                   word_filter: ExclusionFilter) -> List[str]:
    """
    Words that may follow `key`, one entry per draw ticket.

    Unweighted corpora: the filtered bucket as-is (corpus frequency kept).
    Weighted corpora: groups are visited heaviest first; a word already
    offered by a heavier group is not offered again, and each group's
    remaining words are repeated `weight` times.
    """
    bucket = index.bucket(direction, key)
    if not bucket:
        return []
    if not index.weighted:
        pool: List[str] = []
        for words in bucket.values():
            pool.extend(word_filter.valid_words(words))
        return pool

    pool = []
    seen: set = set()
    order = sorted(bucket, key=lambda gid: (-index.weights.get(gid, 1), gid))
    for gid in order:
        valid = word_filter.valid_words(bucket[gid])
        fresh = [w for w in valid if w not in seen]
        pool.extend(fresh * index.weights.get(gid, 1))
        seen.update(valid)
    return pool


def sample(index: TransitionIndex, direction: str, key: WordKey,
           word_filter: ExclusionFilter, rng: random.Random) -> str:
    """One candidate word after `key`, or "" when nothing qualifies."""
    pool = candidate_pool(index, direction, key, word_filter)
    if not pool:
        return ""
    return rng.choice(pool)


def random_valid_word(words, word_filter: ExclusionFilter, rng: random.Random) -> str:
    valid = word_filter.valid_words(words)
    if not valid:
        return ""
    return rng.choice(valid)
