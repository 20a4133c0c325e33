"""
Closed word lists and lexicons, and the `LinguisticResources` context
which bundles them up for the parsers and the cardinality engine
"""

from .resources import (ConfigurationError, LinguisticResources,
                        DEFAULT_LEXICON_DIR, DEFAULT_WORDLIST_DIR,
                        LEXICAL_TYPES)
from .wordlist import PronounEntry, PronounType
