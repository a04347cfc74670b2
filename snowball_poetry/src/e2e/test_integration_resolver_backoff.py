from pathlib import Path
import pytest
from snowball.DB.index import TransitionIndex
from snowball.models import BACKWARD, EXHAUSTED, FORWARD, CorpusSource, GenerationConfig, WordKey
from snowball.resolver import candidate_keys, resolve

class FixedRng:
    def __init__(self, value: int):
        self.value = value
        self.calls = 0

    def randint(self, a, b):
        self.calls += 1
        return self.value

def _index(tmp: Path) -> TransitionIndex:
    p = tmp / "corpus.txt"
    p.write_text("i am the best\no at the moon\n", encoding="utf-8")
    return TransitionIndex.from_sources([CorpusSource(str(p))])

@pytest.mark.e2e
def test_candidate_keys_longest_first():
    assert [str(k) for k in candidate_keys(["i", "am", "all"], FORWARD)] == ["i|am|all", "am|all", "all"]
    assert [str(k) for k in candidate_keys(["i", "am", "all"], BACKWARD)] == ["i|am|all", "i|am", "i"]

@pytest.mark.e2e
def test_longest_key_taken_on_a_hit(tmp_path: Path):
    idx = _index(tmp_path)
    res = resolve(idx, ["i", "am", "the"], FORWARD, GenerationConfig(), FixedRng(1))
    assert res.found and res.key == WordKey.of("i", "am", "the")
    assert res.longest_valid == 3

@pytest.mark.e2e
def test_falls_back_to_single_word_key(tmp_path: Path):
    idx = _index(tmp_path)
    rng = FixedRng(100)
    res = resolve(idx, ["i", "am", "the"], FORWARD, GenerationConfig(multi_key_percentage=70), rng)
    assert res.key == WordKey.of("the")
    assert rng.calls == 2

@pytest.mark.e2e
def test_invalid_keys_are_skipped(tmp_path: Path):
    idx = _index(tmp_path)
    # "o|am|the" never occurs, so the scan starts at "am|the"
    res = resolve(idx, ["o", "am", "the"], FORWARD, GenerationConfig(), FixedRng(1))
    assert res.key == WordKey.of("am", "the")
    assert res.longest_valid == 2

@pytest.mark.e2e
def test_no_valid_key_exhausts(tmp_path: Path):
    idx = _index(tmp_path)
    res = resolve(idx, ["the", "best"], FORWARD, GenerationConfig(), FixedRng(1))
    assert res.outcome == EXHAUSTED and res.key is None
