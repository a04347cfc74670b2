from __future__ import annotations
import argparse, logging, os, sys
from . import __version__
from . import config as CFG
from .engine import Engine
from .errors import ConfigurationError, SanityCheckError
from .loader import load_seed_phrases, split_seed_phrases
from .models import CorpusSource, GenerationConfig, parse_sources

_HINT = (
    "Input data is invalid. Perhaps you used the wrong preprocessed file?\n"
    "Or maybe there just wasn't enough useful data in the file.\n"
    "This file can be generated using the -r option."
)


def _version() -> str:
    return f"Snowball Poem Generator - Version {__version__}"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="snowball",
        description="Generate snowball poems: each word one letter longer than the last.",
        epilog='Example: snowball -r input   |   snowball -s seed-phrases.txt   |   '
               'echo "i am the,the only,disqualified" | snowball -i,',
    )
    p.add_argument("-V", "--version", action="store_true", help="Print program version")

    out = p.add_argument_group("console output")
    out.add_argument("-q", "--quiet", action="store_true", help="Write nothing to stdout/stderr")
    out.add_argument("-o", "--stdout", action="store_true",
                     help="Write the poems to stdout instead of to separate files")
    out.add_argument("-v", "--verbose", action="store_true", help="Verbose diagnostics")
    out.add_argument("-d", "--debug", action="store_true",
                     help="Write the internal tables to separate files")
    out.add_argument("--out-dir", default=".", help="Directory for poem and debug files")

    gen = p.add_argument_group("snowball generation")
    gen.add_argument("-n", type=int, default=CFG.POEM_TARGET, dest="target",
                     help="How many snowballs to create")
    gen.add_argument("-f", type=int, default=CFG.FAILURE_MAX, dest="failures",
                     help="Failed poems to ignore before giving up")
    gen.add_argument("-P", type=int, default=CFG.MULTI_KEY_PERCENTAGE, dest="percent",
                     help="Percentage chance to use longer word keys before shorter keys")
    gen.add_argument("-k", type=int, default=CFG.MIN_KEY_SIZE, dest="min_key",
                     help="Minimum word key size (0 = random words by length)")
    gen.add_argument("--min-key-inclusive", action="store_true",
                     help="Stop growth when the longest key is <= the minimum key size")
    gen.add_argument("-b", type=int, default=CFG.WORD_BEGIN, dest="begin",
                     help="Begin poems at this word length")
    gen.add_argument("-e", type=int, default=None, dest="end",
                     help="Reject poems whose last word is shorter than this")
    gen.add_argument("-x", default="", dest="exclude", help="Letters to exclude (lipograms)")
    gen.add_argument("-X", type=int, default=0, dest="exclude_min",
                     help="Minimum word length to apply -x filtering to")
    gen.add_argument("--seed", type=int, default=None, help="Random seed")
    gen.add_argument("--workers", type=int, default=1, help="Batches to run in parallel")

    seeds = p.add_argument_group("seed phrases")
    seeds.add_argument("-s", dest="seed_file", default=None,
                       help="Input seed phrases from a file, one per line")
    seeds.add_argument("-i", dest="seed_delim", nargs="?", const="\n", default=None,
                       help="Input seed phrases from stdin, split on DELIM (default newline)")

    inp = p.add_argument_group("corpus input")
    inp.add_argument("-p", dest="preprocessed", default=None,
                     help=f"Preprocessed corpus file (default {CFG.PREPROCESSED_FILE})")
    inp.add_argument("-c", "--corpus", action="append", default=[], metavar="PATH[:WEIGHT]",
                     help="Weighted corpus source; repeat to blend corpora")
    inp.add_argument("--cache", default=None, help="Pickle cache for the built tables")
    inp.add_argument("--rebuild", action="store_true", help="Ignore an existing --cache")
    inp.add_argument("-r", dest="raw_dir", default=None,
                     help="Create the preprocessed file from raw text files in this directory")
    inp.add_argument("-l", dest="lexicon", default=None, help="Lexicon of valid words")
    inp.add_argument("-L", dest="no_lexicon", action="store_true", help="Don't use a lexicon")
    inp.add_argument("-t", dest="thesaurus", default=None, help="Thesaurus of word swaps")
    inp.add_argument("-T", dest="no_thesaurus", action="store_true", help="Don't use a thesaurus")
    return p


def _configure_logging(args) -> None:
    if args.quiet:
        level = logging.CRITICAL
    elif args.verbose:
        level = logging.DEBUG
        os.environ["SNOWBALL_VERBOSE"] = "1"
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _check_options(args) -> None:
    if args.lexicon and args.no_lexicon:
        raise ConfigurationError("You can't specify option -l as well as -L.")
    if args.thesaurus and args.no_thesaurus:
        raise ConfigurationError("You can't specify option -t as well as -T.")
    if args.preprocessed and args.corpus:
        raise ConfigurationError("Use either -p or -c, not both.")
    if args.raw_dir and args.corpus:
        raise ConfigurationError("-r writes a single corpus file; it can't be combined with -c.")


def _read_seeds(args):
    seeds = []
    if args.seed_file:
        seeds.extend(load_seed_phrases(args.seed_file))
    if args.seed_delim is not None:
        seeds.extend(split_seed_phrases(sys.stdin.read(), args.seed_delim or "\n"))
    return seeds


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(_version())
        return 0

    _configure_logging(args)

    def err(msg: str) -> None:
        if not args.quiet:
            print(msg, file=sys.stderr)

    eng = Engine()
    try:
        _check_options(args)
        config = GenerationConfig(
            poem_target=args.target,
            failure_max=args.failures,
            multi_key_percentage=args.percent,
            min_key_size=args.min_key,
            word_begin=args.begin,
            word_end=args.end,
            excluded_chars=args.exclude,
            excluded_min_length=args.exclude_min,
            min_key_stop_inclusive=args.min_key_inclusive,
        ).normalized()
        seeds = _read_seeds(args)

        preprocessed = args.preprocessed or CFG.PREPROCESSED_FILE
        if args.raw_dir:
            lexicon = None if args.no_lexicon else (args.lexicon or CFG.LEXICON_FILE)
            thesaurus = None if args.no_thesaurus else (args.thesaurus or CFG.THESAURUS_FILE)
            n = eng.preprocess(
                args.raw_dir, preprocessed, lexicon=lexicon, thesaurus=thesaurus,
                not_in_lexicon_out=(os.path.join(args.out_dir, "output-wordsNotInLexicon.txt")
                                    if args.debug and lexicon else None),
            )
            logging.getLogger(__name__).info("Preprocessed %d chains into %s", n, preprocessed)

        if args.cache and os.path.exists(args.cache) and not (args.rebuild or args.raw_dir):
            eng.load(cache=args.cache)
        else:
            sources = parse_sources(args.corpus) if args.corpus else [CorpusSource(preprocessed)]
            eng.build(sources, cache=args.cache)

        if args.debug:
            eng.dump_tables(args.out_dir)

        results = eng.generate(config, seeds, seed=args.seed, workers=args.workers)

        if args.stdout:
            for res in results:
                for poem in res.poems:
                    print(poem)
        else:
            for path in eng.save_results(results, args.out_dir):
                if not args.quiet:
                    print(path)
        return 0
    except ConfigurationError as exc:
        err(str(exc))
        return 1
    except SanityCheckError as exc:
        err(str(exc))
        err(_HINT)
        return 1
    finally:
        eng.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
