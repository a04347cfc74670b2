from __future__ import annotations
from typing import List, Sequence


def normalize_word(token: str) -> str:
    """
    Casefold a token and return it when it is a usable snowball word,
    otherwise "". Only plain ASCII letters qualify: a token carrying
    punctuation, digits or accents is not a word, it breaks a chain.
    """
    word = token.casefold()
    if word and word.isascii() and word.isalpha():
        return word
    return ""


def split_words(line: str) -> List[str]:
    return line.split()


def grows_by_one(previous: str, word: str) -> bool:
    return len(word) == len(previous) + 1


def is_snowball(words: Sequence[str]) -> bool:
    """True when every word is exactly one letter longer than the one before it."""
    return all(grows_by_one(a, b) for a, b in zip(words, words[1:]))


def is_corpus_word(word: str) -> bool:
    """Corpus words are already normalized: lowercase ASCII letters only."""
    return bool(word) and normalize_word(word) == word
