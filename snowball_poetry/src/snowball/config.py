POEM_TARGET: int = 10_000
FAILURE_MAX: int = 100_000

# Chance (percent) of using a longer word key before falling back to a shorter one
MULTI_KEY_PERCENTAGE: int = 70

# 0 switches the generator to random-by-length mode
MIN_KEY_SIZE: int = 1

WORD_BEGIN: int = 1
RANDOM_WORD_END: int = 8   # used by random mode when no end length is given

# /* ~~~ clamps applied to user supplied values ~~~ */
MAX_WORD_END: int = 100
MAX_PERCENTAGE: int = 100
MAX_MIN_KEY_SIZE: int = 10

# Display separator for WordKey (never parsed back during generation)
KEY_SEPARATOR: str = "|"

# Raw text lines are sliced into chunks of this many characters
MAX_LINE_CHUNK: int = 5000

ENCODING: str = "utf-8"

# Default file names
PREPROCESSED_FILE: str = "snowball-preprocessed.txt"
LEXICON_FILE: str = "snowball-lexicon.txt"
THESAURUS_FILE: str = "snowball-thesaurus.txt"
POEM_FILE_PREFIX: str = "output-snowballPoems-"

# Web UI
WEB_HOST: str = "127.0.0.1"
WEB_PORT: int = 8000
WEB_MAX_POEMS: int = 500
