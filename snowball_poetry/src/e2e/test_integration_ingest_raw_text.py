from pathlib import Path
import pytest
from snowball.engine import Engine
from snowball.errors import ConfigurationError
from snowball.ingest import expand_line, extract_chains, load_thesaurus

def _seed(tmp: Path) -> str:
    root = tmp / "input"; root.mkdir()
    (root / "a.txt").write_text("I am the sea, and we are the best poets.\n", encoding="utf-8")
    (root / "sub").mkdir()
    (root / "sub" / "b.txt").write_text("A an the moon\n", encoding="utf-8")
    (root / ".hidden.txt").write_text("i am the best\n", encoding="utf-8")
    return str(root)

@pytest.mark.e2e
def test_preprocess_directory_writes_sorted_chains(tmp_path: Path):
    raw = _seed(tmp_path)
    out = tmp_path / "corpus.txt"
    n = Engine().preprocess(raw, str(out))
    assert n == 4
    assert out.read_text(encoding="utf-8").splitlines() == [
        "a an the moon", "i am the", "the best", "we are",
    ]

@pytest.mark.e2e
def test_lexicon_breaks_chains_and_reports_rejects(tmp_path: Path):
    raw = _seed(tmp_path)
    lex = tmp_path / "lexicon.txt"
    lex.write_text("i am the best\na an moon\n", encoding="utf-8")
    out = tmp_path / "corpus.txt"
    rejected = tmp_path / "rejected.txt"
    Engine().preprocess(raw, str(out), lexicon=str(lex), not_in_lexicon_out=str(rejected))
    assert out.read_text(encoding="utf-8").splitlines() == ["a an the moon", "i am the", "the best"]
    assert rejected.read_text(encoding="utf-8").splitlines() == ["and", "are", "we"]

@pytest.mark.e2e
def test_thesaurus_variants(tmp_path: Path):
    th = tmp_path / "thesaurus.txt"
    th.write_text("colors colours\nwhilst while\ncompletely utterly totally\n", encoding="utf-8")
    thesaurus = load_thesaurus(str(th))
    assert thesaurus["completely"] == ["utterly", "totally"]
    assert thesaurus["totally"] == ["completely", "utterly"]

    variants = expand_line("the colors we view whilst dreaming", thesaurus)
    assert sorted(variants) == sorted([
        "the colors we view whilst dreaming",
        "the colors we view while dreaming",
        "the colours we view whilst dreaming",
        "the colours we view while dreaming",
    ])

@pytest.mark.e2e
def test_extract_chains_needs_two_words():
    assert extract_chains("so i am, the best") == [["the", "best"]]
    assert extract_chains("i am the sea") == [["i", "am", "the"]]
    assert extract_chains("word") == []
    assert extract_chains("i am 42 the best") == [["i", "am"], ["the", "best"]]

@pytest.mark.e2e
def test_missing_inputs_are_configuration_errors(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        Engine().preprocess(str(tmp_path / "nope"), str(tmp_path / "out.txt"))
    raw = _seed(tmp_path)
    with pytest.raises(ConfigurationError, match="lexicon"):
        Engine().preprocess(raw, str(tmp_path / "out.txt"), lexicon=str(tmp_path / "no-lex.txt"))
