from pathlib import Path
import random
from collections import Counter
import pytest
from snowball.DB.index import TransitionIndex
from snowball.models import FORWARD, CorpusSource, ExclusionFilter, WordKey
from snowball.sampler import candidate_pool, sample

def _seed(tmp: Path, heavy: str, light: str):
    a = tmp / "heavy.txt"; a.write_text(heavy, encoding="utf-8")
    b = tmp / "light.txt"; b.write_text(light, encoding="utf-8")
    return [CorpusSource(str(a), 3), CorpusSource(str(b), 1)]

@pytest.mark.e2e
def test_weights_scale_the_draw(tmp_path: Path):
    idx = TransitionIndex.from_sources(_seed(tmp_path, "i am\n", "i at\n"))
    assert idx.weighted and idx.weights == {0: 3, 1: 1}

    key = WordKey.of("i")
    pool = candidate_pool(idx, FORWARD, key, ExclusionFilter())
    assert Counter(pool) == {"am": 3, "at": 1}

    rng = random.Random(5)
    draws = Counter(sample(idx, FORWARD, key, ExclusionFilter(), rng) for _ in range(4000))
    ratio = draws["am"] / 4000
    assert 0.71 < ratio < 0.79

@pytest.mark.e2e
def test_word_takes_its_heaviest_group_weight(tmp_path: Path):
    idx = TransitionIndex.from_sources(_seed(tmp_path, "i am\n", "i am\ni at\n"))
    pool = candidate_pool(idx, FORWARD, WordKey.of("i"), ExclusionFilter())
    assert Counter(pool) == {"am": 3, "at": 1}

@pytest.mark.e2e
def test_equal_weights_collapse_to_one_group(tmp_path: Path):
    a = tmp_path / "a.txt"; a.write_text("i am\n", encoding="utf-8")
    b = tmp_path / "b.txt"; b.write_text("i at\n", encoding="utf-8")
    idx = TransitionIndex.from_sources([CorpusSource(str(a), 2), CorpusSource.parse(f"{b}:2")])
    assert not idx.weighted
    assert sorted(candidate_pool(idx, FORWARD, WordKey.of("i"), ExclusionFilter())) == ["am", "at"]
