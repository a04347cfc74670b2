"""
Snowball Poem Generator

A snowball poem is a run of words where each word is exactly one letter
longer than the word before it:

    i am the best poet

This package learns which words follow (and precede) which word runs from a
corpus of snowball chains, then walks those transition tables like a
variable-order Markov chain to write new poems, optionally grown backward and
forward around a seed phrase.

Main entry points:
    Engine: build/load the tables, generate batches, write files
    generate_batch(index, config, seed_phrase): one batch of poems
    GenerationConfig: per-batch options

Example Usage:
    from snowball import Engine, GenerationConfig

    eng = Engine()
    eng.build(["snowball-preprocessed.txt"])
    for result in eng.generate(GenerationConfig(poem_target=10), ["the only"]):
        print("\n".join(result.poems))
"""

# src/snowball/__init__.py
from .engine import Engine  # re-export
from .errors import ConfigurationError, SanityCheckError, SnowballError
from .models import BatchResult, CorpusSource, GenerationConfig, SeedPhrase, WordKey
from .search import generate_batch

__version__ = "1.5.0"
__all__ = [
    "Engine",
    "generate_batch",
    "GenerationConfig",
    "CorpusSource",
    "SeedPhrase",
    "WordKey",
    "BatchResult",
    "SnowballError",
    "ConfigurationError",
    "SanityCheckError",
]
