from __future__ import annotations
import logging
import random
from typing import List, Optional

from .DB.index import TransitionIndex
from .models import BACKWARD, FORWARD, RANDOM, STOPPED, GenerationConfig, SeedPhrase
from .resolver import resolve
from .sampler import random_valid_word, sample

log = logging.getLogger(__name__)

# extend() results, besides STOPPED (minimum key size ended forward growth)
REACHED = "reached"      # stop length reached
DEAD_END = "dead_end"    # no key/candidate left


class SnowballWalker:
    """
    Builds one poem per walk() call.

      Start -> BackwardFill (middle seeds only) -> ForwardFill -> poem | None

    walk() returns the words of the poem in ascending length, or None when the
    attempt failed and should be counted against the failure budget.
    """
    def __init__(self, index: TransitionIndex, config: GenerationConfig,
                 rng: Optional[random.Random] = None) -> None:
        self.index = index
        self.config = config
        self.rng = rng or random.Random()
        self.word_filter = config.word_filter
        # every unseeded poem starts here, so filter once
        self._starting_words = index.valid_words_of_length(config.word_begin, self.word_filter)

    # ---- public ----
    def walk(self, seed: Optional[SeedPhrase] = None) -> Optional[List[str]]:
        if self.config.mode == RANDOM:
            return self._walk_random()

        snowball = self._start(seed)
        if snowball is None:
            return None

        begin = self.config.word_begin
        if seed is not None and seed.kind == "middle" and len(seed.words[0]) > begin:
            if self.extend(snowball, BACKWARD, stop_length=begin) != REACHED:
                log.debug("backward fill failed for %r", seed.text)
                return None

        self.extend(snowball, FORWARD)

        if self.config.word_end is not None:
            minimum = 1 + self.config.word_end - begin
            if len(snowball) < minimum:
                log.debug("poem too short (%d < %d words): %s",
                          len(snowball), minimum, " ".join(snowball))
                return None
        return snowball

    def extend(self, snowball: List[str], direction: str,
               stop_length: Optional[int] = None) -> str:
        """
        Grow `snowball` in place, one word at a time, in `direction`.
        Backward growth prepends and ends once the first word is
        `stop_length` letters long; forward growth appends until the chain
        dead-ends or the minimum key size stops it.
        """
        while True:
            edge = snowball[0] if direction == BACKWARD else snowball[-1]
            if stop_length is not None and len(edge) <= stop_length:
                return REACHED

            res = resolve(self.index, snowball, direction, self.config, self.rng)
            if res.outcome == STOPPED:
                return STOPPED
            if not res.found:
                return DEAD_END

            word = sample(self.index, direction, res.key, self.word_filter, self.rng)
            if not word:
                return DEAD_END
            if direction == BACKWARD:
                snowball.insert(0, word)
            else:
                snowball.append(word)

    # ---- internals ----
    def _start(self, seed: Optional[SeedPhrase]) -> Optional[List[str]]:
        if seed is None:
            if not self._starting_words:
                return None
            return [self.rng.choice(self._starting_words)]
        return list(seed.words)

    def _walk_random(self) -> Optional[List[str]]:
        out: List[str] = []
        for n in range(self.config.word_begin, self.config.effective_word_end + 1):
            word = random_valid_word(self.index.words_of_length(n), self.word_filter, self.rng)
            if not word:
                return None
            out.append(word)
        return out
