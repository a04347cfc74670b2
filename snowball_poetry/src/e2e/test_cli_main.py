import io
from pathlib import Path
import pytest
from snowball.__main__ import main

def _seed(tmp: Path) -> str:
    p = tmp / "corpus.txt"
    p.write_text("a am jam\n", encoding="utf-8")
    return str(p)

@pytest.mark.e2e
def test_version(capsys):
    assert main(["-V"]) == 0
    assert capsys.readouterr().out.startswith("Snowball Poem Generator - Version")

@pytest.mark.e2e
def test_poems_to_stdout(tmp_path: Path, capsys):
    corpus = _seed(tmp_path)
    assert main(["-p", corpus, "-n", "1", "-f", "10", "-o", "--seed", "3"]) == 0
    assert capsys.readouterr().out == "a am jam\n"

@pytest.mark.e2e
def test_poems_to_files(tmp_path: Path, capsys):
    corpus = _seed(tmp_path)
    out_dir = tmp_path / "out"
    assert main(["-p", corpus, "-n", "1", "-f", "10", "--out-dir", str(out_dir)]) == 0
    [path] = capsys.readouterr().out.splitlines()
    assert Path(path).read_text(encoding="utf-8") == "a am jam\n"

@pytest.mark.e2e
def test_seed_phrases_from_stdin(tmp_path: Path, capsys, monkeypatch):
    corpus = _seed(tmp_path)
    monkeypatch.setattr("sys.stdin", io.StringIO("a am;am jam"))
    assert main(["-p", corpus, "-i;", "-n", "1", "-f", "10", "-o"]) == 0
    assert capsys.readouterr().out.splitlines() == ["a am jam", "a am jam"]

@pytest.mark.e2e
def test_raw_preprocess_then_generate(tmp_path: Path, capsys):
    raw = tmp_path / "input"; raw.mkdir()
    (raw / "t.txt").write_text("A an the moon.\n", encoding="utf-8")
    out = tmp_path / "pre.txt"
    assert main(["-r", str(raw), "-p", str(out), "-L", "-T", "-n", "1", "-f", "10", "-o"]) == 0
    assert out.read_text(encoding="utf-8") == "a an the\n"
    assert capsys.readouterr().out == "a an the\n"

@pytest.mark.e2e
def test_cache_is_reused(tmp_path: Path, capsys):
    corpus = _seed(tmp_path)
    cache = tmp_path / "idx.pkl"
    assert main(["-p", corpus, "--cache", str(cache), "-n", "1", "-f", "10", "-o"]) == 0
    assert main(["-p", str(tmp_path / "gone.txt"), "--cache", str(cache),
                 "-n", "1", "-f", "10", "-o"]) == 0
    assert capsys.readouterr().out == "a am jam\na am jam\n"

@pytest.mark.e2e
def test_contradictory_options(tmp_path: Path, capsys):
    assert main(["-p", _seed(tmp_path), "-l", "lex.txt", "-L"]) == 1
    assert "-l as well as -L" in capsys.readouterr().err

@pytest.mark.e2e
def test_missing_corpus(tmp_path: Path, capsys):
    assert main(["-p", str(tmp_path / "nope.txt")]) == 1
    assert "Cannot open corpus file" in capsys.readouterr().err

@pytest.mark.e2e
def test_sanity_failure_prints_hint(tmp_path: Path, capsys):
    assert main(["-p", _seed(tmp_path), "-b", "9"]) == 1
    err = capsys.readouterr().err
    assert "Beginning word length" in err
    assert "-r option" in err

@pytest.mark.e2e
def test_quiet_suppresses_errors(tmp_path: Path, capsys):
    assert main(["-q", "-p", str(tmp_path / "nope.txt")]) == 1
    captured = capsys.readouterr()
    assert captured.out == "" and captured.err == ""

@pytest.mark.e2e
def test_weighted_corpus_sources(tmp_path: Path, capsys):
    heavy = tmp_path / "heavy.txt"; heavy.write_text("a am jam\n", encoding="utf-8")
    light = tmp_path / "light.txt"; light.write_text("i am the\n", encoding="utf-8")
    argv = ["-c", f"{heavy}:3", "-c", str(light), "-n", "2", "-f", "200", "-o", "--seed", "2"]
    assert main(argv) == 0
    poems = capsys.readouterr().out.splitlines()
    assert len(poems) == 2
    assert set(poems) <= {"a am jam", "a am the", "i am jam", "i am the"}

@pytest.mark.e2e
def test_bad_corpus_weight(tmp_path: Path, capsys):
    assert main(["-c", f"{_seed(tmp_path)}:0"]) == 1
    assert "weight" in capsys.readouterr().err
