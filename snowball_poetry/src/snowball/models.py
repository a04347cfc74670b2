from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from . import config as CFG
from .errors import ConfigurationError
from .normalize import is_snowball, normalize_word

FORWARD = "forward"
BACKWARD = "backward"

MARKOV = "markov"
RANDOM = "random"


@dataclass(frozen=True)
class WordKey:
    words: Tuple[str, ...]        # ascending word length, as in the snowball

    def __len__(self) -> int:
        return len(self.words)

    def __str__(self) -> str:
        return CFG.KEY_SEPARATOR.join(self.words)

    @classmethod
    def of(cls, *words: str) -> "WordKey":
        return cls(tuple(words))


@dataclass(frozen=True)
class CorpusSource:
    path: str
    weight: int = 1

    def __post_init__(self) -> None:
        if int(self.weight) < 1:
            raise ConfigurationError(f"corpus weight must be >= 1: {self.path}:{self.weight}")

    @classmethod
    def parse(cls, spec: str) -> "CorpusSource":
        """'path' or 'path:weight' (a non-numeric suffix is part of the path)."""
        head, sep, tail = spec.rpartition(":")
        if sep and head and tail.isdigit():
            return cls(path=head, weight=int(tail))
        return cls(path=spec)


@dataclass(frozen=True)
class SeedPhrase:
    words: Tuple[str, ...]

    @property
    def kind(self) -> str:
        # a one-letter first word can only be the start of a snowball
        return "starting" if len(self.words[0]) == 1 else "middle"

    @property
    def text(self) -> str:
        return " ".join(self.words)

    @classmethod
    def parse(cls, text: str) -> Optional["SeedPhrase"]:
        words = tuple(normalize_word(w) for w in text.split())
        if not words:
            return None
        if not all(words) or not is_snowball(words):
            raise ConfigurationError(f"seed phrase is not a snowball: {text.strip()!r}")
        return cls(words)


@dataclass(frozen=True)
class ExclusionFilter:
    """Lipogram filter: drop words containing any of `chars`, for words at least `min_length` long."""
    chars: FrozenSet[str] = frozenset()
    min_length: int = 0

    @property
    def active(self) -> bool:
        return bool(self.chars)

    def allows(self, word: str) -> bool:
        if not self.chars or len(word) < self.min_length:
            return True
        return self.chars.isdisjoint(word)

    def valid_words(self, words: Sequence[str]) -> List[str]:
        if not self.chars or not words:
            return list(words)
        # a bucket holds words of a single length, so its first word decides exemption
        if len(words[0]) < self.min_length:
            return list(words)
        return [w for w in words if self.allows(w)]


@dataclass(frozen=True)
class GenerationConfig:
    poem_target: int = CFG.POEM_TARGET
    failure_max: int = CFG.FAILURE_MAX
    multi_key_percentage: int = CFG.MULTI_KEY_PERCENTAGE
    min_key_size: int = CFG.MIN_KEY_SIZE
    word_begin: int = CFG.WORD_BEGIN
    word_end: Optional[int] = None
    excluded_chars: str = ""
    excluded_min_length: int = 0
    min_key_stop_inclusive: bool = False

    @property
    def mode(self) -> str:
        return RANDOM if self.min_key_size == 0 else MARKOV

    @property
    def effective_word_end(self) -> int:
        return self.word_end if self.word_end is not None else CFG.RANDOM_WORD_END

    @property
    def word_filter(self) -> ExclusionFilter:
        return ExclusionFilter(frozenset(self.excluded_chars), self.excluded_min_length)

    def normalized(self) -> "GenerationConfig":
        """Reject negative values and clamp the rest into their usable ranges."""
        for name in ("poem_target", "failure_max", "multi_key_percentage",
                     "min_key_size", "word_begin", "excluded_min_length"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")
        if self.word_end is not None and self.word_end < 0:
            raise ConfigurationError("word_end must not be negative")

        word_end = self.word_end
        if word_end is not None:
            word_end = min(max(word_end, 1), CFG.MAX_WORD_END)
        return replace(
            self,
            multi_key_percentage=min(self.multi_key_percentage, CFG.MAX_PERCENTAGE),
            min_key_size=min(self.min_key_size, CFG.MAX_MIN_KEY_SIZE),
            word_begin=max(self.word_begin, 1),
            word_end=word_end,
            excluded_chars="".join(sorted(set(self.excluded_chars.lower()))),
        )


# Resolver outcomes
FOUND = "found"
EXHAUSTED = "exhausted"
STOPPED = "stopped"


@dataclass(frozen=True)
class Resolution:
    outcome: str
    key: Optional[WordKey] = None
    longest_valid: int = 0

    @property
    def found(self) -> bool:
        return self.outcome == FOUND


@dataclass
class BatchResult:
    seed_phrase: str
    poems: List[str] = field(default_factory=list)
    successes: int = 0
    failures: int = 0
    target: int = 0
    failure_max: int = 0

    @property
    def exhausted(self) -> bool:
        return self.failures >= self.failure_max and self.successes < self.target

    def as_dict(self) -> dict:
        return {
            "seed_phrase": self.seed_phrase,
            "poems": list(self.poems),
            "successes": self.successes,
            "failures": self.failures,
            "target": self.target,
            "exhausted": self.exhausted,
        }


def parse_sources(specs: Iterable[str]) -> List[CorpusSource]:
    return [CorpusSource.parse(s) for s in specs]
