from __future__ import annotations
import logging
import random
from typing import List, Optional, Sequence

from .DB.index import TransitionIndex
from .models import (BACKWARD, EXHAUSTED, FORWARD, FOUND, STOPPED,
                     GenerationConfig, Resolution, WordKey)

log = logging.getLogger(__name__)


def candidate_keys(snowball: Sequence[str], direction: str) -> List[WordKey]:
    """
    All keys usable to extend `snowball`, longest first.

      snowball = "i am all cold", forward:    i|am|all|cold, am|all|cold, all|cold, cold
      snowball = "i am all cold", backward:   i|am|all|cold, i|am|all, i|am, i

    The last key is always the single word at the end being extended.
    """
    n = len(snowball)
    words = tuple(snowball)
    if direction == FORWARD:
        return [WordKey(words[i:]) for i in range(n)]
    if direction == BACKWARD:
        return [WordKey(words[:n - i]) for i in range(n)]
    raise ValueError(f"unknown direction: {direction!r}")


def first_valid_key(index: TransitionIndex, keys: Sequence[WordKey], direction: str,
                    config: GenerationConfig) -> Optional[int]:
    word_filter = config.word_filter
    for i, key in enumerate(keys):
        if index.has_valid(direction, key, word_filter):
            return i
    return None


def _below_min_key_size(longest_valid: int, config: GenerationConfig) -> bool:
    if config.min_key_stop_inclusive:
        return longest_valid <= config.min_key_size
    return longest_valid < config.min_key_size


def resolve(index: TransitionIndex, snowball: Sequence[str], direction: str,
            config: GenerationConfig, rng: random.Random) -> Resolution:
    """
    Pick the key used to extend `snowball` one word in `direction`.

    Keys with no valid candidate are skipped. Starting from the longest valid
    key, each multi-word key is taken with probability
    multi_key_percentage/100; if none is taken the single-word key is used.

    Forward only: when even the longest valid key is shorter than
    min_key_size (and the poem is already longer than that), growth stops
    with outcome STOPPED instead of settling for a short key.
    """
    keys = candidate_keys(snowball, direction)
    i_element = first_valid_key(index, keys, direction, config)
    if i_element is None:
        return Resolution(EXHAUSTED)

    longest_valid = len(keys) - i_element
    if direction == FORWARD and _below_min_key_size(longest_valid, config):
        if len(snowball) > config.min_key_size:
            return Resolution(STOPPED, longest_valid=longest_valid)

    chosen = keys[-1]
    for i in range(i_element, len(keys) - 1):
        if rng.randint(1, 100) <= config.multi_key_percentage:
            chosen = keys[i]
            break

    log.debug("%s key %r (longest valid %d)", direction, str(chosen), longest_valid)
    return Resolution(FOUND, key=chosen, longest_valid=longest_valid)
