from pathlib import Path
import random
import pytest
from snowball.DB.index import TransitionIndex
from snowball.errors import SanityCheckError
from snowball.models import CorpusSource, GenerationConfig, RANDOM
from snowball.search import generate_batch

def _seed(tmp: Path) -> str:
    p = tmp / "corpus.txt"
    p.write_text("i am the best poems\na an all bold rhyme\n", encoding="utf-8")
    return str(p)

@pytest.mark.e2e
def test_random_mode_draws_one_word_per_length(tmp_path: Path):
    idx = TransitionIndex.from_sources([CorpusSource(_seed(tmp_path))])
    cfg = GenerationConfig(poem_target=5, failure_max=1000, min_key_size=0,
                           word_begin=2, word_end=5)
    assert cfg.mode == RANDOM
    res = generate_batch(idx, cfg, rng=random.Random(2))
    assert res.successes == 5
    vocab = {w for n in range(1, 6) for w in idx.words_of_length(n)}
    for poem in res.poems:
        words = poem.split()
        assert [len(w) for w in words] == [2, 3, 4, 5]
        assert set(words) <= vocab

@pytest.mark.e2e
def test_random_mode_default_end_needs_long_words(tmp_path: Path):
    idx = TransitionIndex.from_sources([CorpusSource(_seed(tmp_path))])
    with pytest.raises(SanityCheckError, match='"6" letters long'):
        generate_batch(idx, GenerationConfig(poem_target=1, min_key_size=0))
