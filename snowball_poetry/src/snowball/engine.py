# snowball/engine.py
from __future__ import annotations

import os
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .DB.index import TransitionIndex
from .DB.storage import (load_index, save_dead_branches, save_index, save_length_index,
                         save_poems, save_table, save_table_key_header)
from .errors import ConfigurationError
from .ingest import load_lexicon, load_thesaurus, preprocess_directory
from .loader import load_corpus
from .models import BatchResult, CorpusSource, GenerationConfig, SeedPhrase
from .search import generate_batch

log = logging.getLogger(__name__)

SourceLike = Union[CorpusSource, str]


def _as_source(src: SourceLike) -> CorpusSource:
    return src if isinstance(src, CorpusSource) else CorpusSource.parse(str(src))


class Engine:
    """
    Thin orchestration layer that glues together:
      - corpus loading (loader.load_corpus) from one or more weighted sources,
      - the transition tables (DB.index.TransitionIndex),
      - batch generation (search.generate_batch),
      - raw text preprocessing and the debug/poem files (ingest, DB.storage).

    Public API (used by CLI/Flask/GUI):
      * preprocess(raw_dir, corpus_out, ...): raw text -> corpus file
      * build(sources, ...): corpus -> index -> (optional) pickle cache
      * load(cache=...):     index from a pickle cache
      * generate(config, seed_phrases): one BatchResult per seed phrase
      * dump_tables(out_dir): debug views of the tables
      * shutdown()
    """

    # ------------- lifecycle -------------

    def __init__(self) -> None:
        self.index: Optional[TransitionIndex] = None

    # /* ~~~ Build the tables from corpus files ~~~ */
    def build(
        self,
        sources: Iterable[SourceLike],
        *,
        cache: Optional[str] = None,           # path to pickle cache for the index
        verbose: bool = False,
    ) -> None:
        if verbose:
            logging.basicConfig(level=logging.DEBUG)
            os.environ["SNOWBALL_VERBOSE"] = "1"

        sources = [_as_source(s) for s in sources]
        if not sources:
            raise ConfigurationError("build(): at least one corpus source is required")

        log.info("Loading corpus from %s", [f"{s.path}:{s.weight}" for s in sources])
        corpus = load_corpus(sources)

        log.info("Building transition tables")
        idx = TransitionIndex()
        idx.build(corpus)

        if cache:
            log.info("Saving pickle index to %s", cache)
            save_index(idx, cache)

        self.index = idx
        log.info("Engine build() complete: records=%d", len(corpus.records))

    # /* ~~~ Load an already-built index ~~~ */
    def load(self, *, cache: Optional[str] = None, verbose: bool = False) -> None:
        if verbose:
            logging.basicConfig(level=logging.DEBUG)
            os.environ["SNOWBALL_VERBOSE"] = "1"

        if not cache:
            raise ConfigurationError("load(): require --cache to load an index")
        if not os.path.exists(cache):
            raise ConfigurationError(f"Index cache not found: {cache}")

        log.info("Loading pickle index from %s", cache)
        idx = load_index(cache)
        if not isinstance(idx, TransitionIndex):
            raise ConfigurationError(f"{cache} does not contain a snowball index")
        self.index = idx
        log.info("Engine load() complete: %s", idx.stats())

    # /* ~~~ Raw text -> corpus file ~~~ */
    def preprocess(
        self,
        raw_dir: str,
        corpus_out: str,
        *,
        lexicon: Optional[str] = None,
        thesaurus: Optional[str] = None,
        not_in_lexicon_out: Optional[str] = None,
    ) -> int:
        lex = load_lexicon(lexicon) if lexicon else None
        thes = load_thesaurus(thesaurus) if thesaurus else None
        return preprocess_directory(
            raw_dir, corpus_out,
            lexicon=lex, thesaurus=thes, not_in_lexicon_out=not_in_lexicon_out,
        )

    # ------------- generation -------------

    # /* ~~~ One batch per seed phrase (or one unseeded batch) ~~~ */
    def generate(
        self,
        config: GenerationConfig,
        seed_phrases: Optional[Sequence[Union[SeedPhrase, str]]] = None,
        *,
        seed: Optional[int] = None,
        workers: int = 1,
    ) -> List[BatchResult]:
        if not self.index:
            raise RuntimeError("Engine not initialized. Call build() or load() first.")

        seeds: List[Optional[Union[SeedPhrase, str]]] = list(seed_phrases or []) or [None]
        # one independent generator per batch; results do not depend on `workers`
        master = random.Random(seed)
        rngs = [random.Random(master.getrandbits(64)) for _ in seeds]
        index = self.index

        def _run(i: int) -> BatchResult:
            return generate_batch(index, config, seeds[i], rngs[i])

        if workers <= 1 or len(seeds) == 1:
            return [_run(i) for i in range(len(seeds))]

        with ThreadPoolExecutor(max_workers=workers) as ex:
            return list(ex.map(_run, range(len(seeds))))

    # ------------- files -------------

    def save_results(self, results: Iterable[BatchResult], out_dir: str = ".") -> List[str]:
        paths = []
        for res in results:
            paths.append(save_poems(res.poems, out_dir, res.seed_phrase))
        return paths

    def dump_tables(self, out_dir: str = ".", *, dedupe: bool = False) -> Dict[str, str]:
        if not self.index:
            raise RuntimeError("Engine not initialized. Call build() or load() first.")
        idx = self.index
        paths = {
            "forward_key_header": os.path.join(out_dir, "output-wordsForwards-keyHeader.txt"),
            "forward": os.path.join(out_dir, "output-wordsForwards.txt"),
            "backward_key_header": os.path.join(out_dir, "output-wordsBackwards-keyHeader.txt"),
            "backward": os.path.join(out_dir, "output-wordsBackwards.txt"),
            "lengths": os.path.join(out_dir, "output-wordsWithLength.txt"),
            "dead_branches": os.path.join(out_dir, "output-wordsDeadBranches.txt"),
        }
        save_table_key_header(idx.forward, paths["forward_key_header"], dedupe=dedupe)
        save_table(idx.forward, paths["forward"], dedupe=dedupe)
        save_table_key_header(idx.backward, paths["backward_key_header"], dedupe=dedupe)
        save_table(idx.backward, paths["backward"], dedupe=dedupe)
        save_length_index(idx.lengths, paths["lengths"])
        save_dead_branches(idx.dead_branches(), paths["dead_branches"])
        for p in paths.values():
            log.debug("dumped %s", p)
        return paths

    # ------------- teardown -------------

    def shutdown(self) -> None:
        self.index = None
        log.info("Engine shutdown complete")
