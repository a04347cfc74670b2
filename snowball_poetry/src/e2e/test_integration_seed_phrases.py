from pathlib import Path
import pytest
from snowball.engine import Engine
from snowball.errors import ConfigurationError
from snowball.loader import load_seed_phrases, split_seed_phrases
from snowball.models import GenerationConfig, SeedPhrase

def _seed(tmp: Path) -> str:
    p = tmp / "corpus.txt"
    p.write_text(
        "i am the only poets\n"
        "a an the only\n"
        "i am the best\n"
        "o at the sea\n",
        encoding="utf-8",
    )
    return str(p)

@pytest.mark.e2e
def test_starting_seed_prefixes_every_poem(tmp_path: Path):
    eng = Engine()
    try:
        eng.build([_seed(tmp_path)])
        [res] = eng.generate(GenerationConfig(poem_target=3, failure_max=500), ["i am"], seed=4)
        assert res.seed_phrase == "i am"
        assert res.poems
        assert all(p.startswith("i am ") for p in res.poems)
    finally:
        eng.shutdown()

@pytest.mark.e2e
def test_middle_seed_grows_both_ways(tmp_path: Path):
    eng = Engine()
    try:
        eng.build([_seed(tmp_path)])
        [res] = eng.generate(GenerationConfig(poem_target=4, failure_max=500), ["The Only"], seed=4)
        assert res.seed_phrase == "the only"
        assert res.poems
        for poem in res.poems:
            words = poem.split()
            assert len(words[0]) == 1
            assert "the only" in poem
    finally:
        eng.shutdown()

@pytest.mark.e2e
def test_one_batch_per_seed_phrase(tmp_path: Path):
    eng = Engine()
    try:
        eng.build([_seed(tmp_path)])
        phrases = split_seed_phrases("i am the,the only,at the", ",")
        results = eng.generate(GenerationConfig(poem_target=1, failure_max=100), phrases, seed=9)
        assert [r.seed_phrase for r in results] == ["i am the", "the only", "at the"]
        again = eng.generate(GenerationConfig(poem_target=1, failure_max=100), phrases,
                             seed=9, workers=3)
        assert [r.poems for r in again] == [r.poems for r in results]
    finally:
        eng.shutdown()

@pytest.mark.e2e
def test_seed_phrase_parsing(tmp_path: Path):
    assert SeedPhrase.parse("   ") is None
    assert SeedPhrase.parse("I am").kind == "starting"
    assert SeedPhrase.parse("the only").kind == "middle"
    with pytest.raises(ConfigurationError):
        SeedPhrase.parse("the am")

    f = tmp_path / "seeds.txt"
    f.write_text("i am\n\nthe only\n", encoding="utf-8")
    assert [s.text for s in load_seed_phrases(str(f))] == ["i am", "the only"]
    with pytest.raises(ConfigurationError):
        load_seed_phrases(str(tmp_path / "missing.txt"))
