from pathlib import Path
import pytest
from snowball.engine import Engine
from snowball.DB.index import TransitionIndex
from snowball.models import CorpusSource, GenerationConfig, WordKey

def _seed(tmp: Path) -> str:
    p = tmp / "corpus.txt"
    p.write_text("a am jam\n", encoding="utf-8")
    return str(p)

@pytest.mark.e2e
def test_single_record_comes_back_out(tmp_path: Path):
    corpus = _seed(tmp_path)
    eng = Engine()
    try:
        eng.build([corpus])
        [res] = eng.generate(GenerationConfig(poem_target=1, failure_max=10), seed=7)
        assert res.poems == ["a am jam"]
        assert res.successes == 1 and res.failures == 0
        assert not res.exhausted
    finally:
        eng.shutdown()

@pytest.mark.e2e
def test_duplicates_count_as_failures(tmp_path: Path):
    corpus = _seed(tmp_path)
    eng = Engine()
    try:
        eng.build([corpus])
        [res] = eng.generate(GenerationConfig(poem_target=3, failure_max=25), seed=1)
        assert res.poems == ["a am jam"]
        assert res.successes == 1
        assert res.failures == 25
        assert res.exhausted
    finally:
        eng.shutdown()

@pytest.mark.e2e
def test_generate_requires_tables():
    with pytest.raises(RuntimeError):
        Engine().generate(GenerationConfig(poem_target=1))

@pytest.mark.e2e
def test_single_record_tables(tmp_path: Path):
    idx = TransitionIndex.from_sources([CorpusSource(_seed(tmp_path))])
    assert idx.forward == {
        WordKey.of("a"): {0: ("am",)},
        WordKey.of("a", "am"): {0: ("jam",)},
        WordKey.of("am"): {0: ("jam",)},
    }
    assert idx.backward == {
        WordKey.of("am"): {0: ("a",)},
        WordKey.of("am", "jam"): {0: ("a",)},
        WordKey.of("jam"): {0: ("am",)},
    }
    # the last word of a chain is indexed by length too
    assert idx.lengths == {1: ("a",), 2: ("am",), 3: ("jam",)}
