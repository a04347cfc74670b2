from __future__ import annotations
import logging
import random
from typing import Optional, Set, Union

from .DB.index import TransitionIndex
from .errors import SanityCheckError
from .models import MARKOV, RANDOM, BatchResult, GenerationConfig, SeedPhrase
from .walker import SnowballWalker

log = logging.getLogger(__name__)


def validate(index: TransitionIndex, config: GenerationConfig, *, seeded: bool = False) -> None:
    """
    Fail fast when the tables cannot produce what `config` asks for, instead
    of burning the whole failure budget.
    """
    word_filter = config.word_filter
    begin = config.word_begin

    if (not index.words_of_length(1) or not index.words_of_length(2)
            or not index.forward or not index.backward):
        raise SanityCheckError("Snowball input files contain invalid (or no) data.")

    if not index.words_of_length(begin):
        raise SanityCheckError(f'Beginning word length "{begin}" is too high for your input.')

    if word_filter.active:
        check = config.excluded_min_length or begin
        if not index.valid_words_of_length(check, word_filter):
            raise SanityCheckError(
                f'The exclude characters string "{config.excluded_chars}" '
                f"is too restrictive for your input."
            )

    if config.mode == MARKOV and not seeded:
        if not index.valid_words_of_length(begin, word_filter):
            raise SanityCheckError(f'No valid starting words of length "{begin}".')

    if config.word_end is not None or config.mode == RANDOM:
        end = config.effective_word_end
        if config.mode == RANDOM and end < begin:
            raise SanityCheckError(
                f'End word length "{end}" is shorter than beginning word length "{begin}".'
            )
        for n in range(begin, end + 1):
            if not index.valid_words_of_length(n, word_filter):
                raise SanityCheckError(
                    f'You have specified to generate poems from "{begin}" letters long '
                    f'to "{end}" letters. However, there are no words in the corpus '
                    f'that are "{n}" letters long.'
                )


def generate_batch(index: TransitionIndex,
                   config: GenerationConfig,
                   seed_phrase: Union[SeedPhrase, str, None] = None,
                   rng: Optional[random.Random] = None) -> BatchResult:
    """
    Walk until `poem_target` distinct poems exist or `failure_max` attempts
    have been discarded. A failed walk and a repeated poem both count as a
    discarded attempt. Poems come back sorted.
    """
    config = config.normalized()
    seed = SeedPhrase.parse(seed_phrase) if isinstance(seed_phrase, str) else seed_phrase
    if seed is not None and config.mode == RANDOM:
        log.debug("random mode ignores seed phrase %r", seed.text)

    validate(index, config, seeded=seed is not None and config.mode == MARKOV)

    walker = SnowballWalker(index, config, rng)
    result = BatchResult(
        seed_phrase=seed.text if seed else "",
        target=config.poem_target,
        failure_max=config.failure_max,
    )
    poems: Set[str] = set()
    walk_seed = seed if config.mode == MARKOV else None

    while result.successes < config.poem_target and result.failures < config.failure_max:
        words = walker.walk(walk_seed)
        if words is None:
            result.failures += 1
            continue
        poem = " ".join(words)
        if poem in poems:
            result.failures += 1
            continue
        poems.add(poem)
        result.successes += 1

    result.poems = sorted(poems)

    if result.failures >= config.failure_max and result.successes < config.poem_target:
        log.info("Too many incomplete poems.")
        if seed is not None:
            log.info("Couldn't generate enough beginnings from seed phrase: %s", seed.text)
        log.info("Target: %d - Actual: %d", config.poem_target, result.successes)
    else:
        log.info("Batch %r: %d poems, %d discarded attempts",
                 result.seed_phrase, result.successes, result.failures)
    return result
