#!/usr/bin/env python
# -*- coding: utf-8 -*-

# License: BSD3

"""
The linguistic resources context.

Parsing captions and inferring mention cardinalities both rely on a
handful of closed word lists (articles, numerals, quantifier words,
pronouns, non-visual heads, mass nouns, collective nouns, plural-looking
artifacts), a lexical type lexicon, and a lemmatizer. These are gathered
in one immutable `LinguisticResources` object which you build once with
`LinguisticResources.load` and pass to every call that needs it ::

    res = LinguisticResources.load(lemmatizer=WordNetLemmatizer())
    cap = parse_coref_string(line, res)

The default word lists ship with this package (see `DEFAULT_WORDLIST_DIR`
and `DEFAULT_LEXICON_DIR`); pass your own directories to override them.
"""

from collections import namedtuple
from os.path import join, dirname

from .wordlist import (WordListError,
                       read_counted_list, read_lexicon,
                       read_pronoun_list, read_word_list)


DEFAULT_WORDLIST_DIR = join(dirname(__file__), 'data')
"""
Directory holding the default closed word lists
"""

DEFAULT_LEXICON_DIR = join(dirname(__file__), 'data', 'lexicon')
"""
Directory holding the default lexical type lexicon, one file per type
"""

LEXICAL_TYPES = ['animals', 'bodyparts', 'clothing', 'colors',
                 'instruments', 'people', 'scene', 'vehicles']
"""
Lexical types for which we expect a `<type>.txt` lexicon file
"""

_PLAIN_LISTS = {'articles': 'articles.txt',
                'nonvisual': 'nonvisual.txt',
                'mass': 'mass.txt',
                'singular_artifacts': 'singular_artifacts.txt'}

# counted lists, and whether every entry needs a count
_COUNTED_LISTS = {'numerals': ('numerals.txt', True),
                  'quantifiers': ('quantifiers.txt', True),
                  'collectives': ('collectives.txt', False)}

_PRONOUN_LIST = 'pronouns.txt'


class ConfigurationError(Exception):
    """
    A resource we need was not supplied, or could not be loaded.
    We would rather fail here than silently carry on with empty
    word lists.
    """
    def __init__(self, *args, **kw):
        super(ConfigurationError, self).__init__(*args, **kw)


def _load(reader, filename, *args):
    "read a word list, reporting any problem as a ConfigurationError"
    try:
        return reader(filename, *args)
    except (IOError, OSError) as oops:
        raise ConfigurationError("Could not read word list %s: %s" %
                                 (filename, oops))
    except WordListError as oops:
        raise ConfigurationError("Malformed word list %s: %s" %
                                 (filename, oops))


class LinguisticResources(namedtuple("LinguisticResources",
                                     ["articles",
                                      "numerals",
                                      "quantifiers",
                                      "pronouns",
                                      "nonvisual",
                                      "mass",
                                      "collectives",
                                      "singular_artifacts",
                                      "lexicon",
                                      "lemmatizer"])):
    """
    Immutable bundle of everything the parsers and the cardinality
    engine need to know about words.

    Attributes
    ----------
    articles : frozenset of str
        Articles (a, an, the)
    numerals : frozendict from str to int
        Spelled out numbers
    quantifiers : frozendict from str to int
        Quantifier words, mapped to the least quantity they denote
        (several -> 3)
    pronouns : frozendict from str to PronounEntry
        The pronoun table
    nonvisual : frozenset of str
        Head lemmas that do not denote anything visible
    mass : frozenset of str
        Mass noun lemmas
    collectives : frozendict from str to int or None
        Collective noun lemmas, with a fixed count when they have one
        (dozen -> 12, pair -> 2)
    singular_artifacts : frozenset of str
        Plural looking nouns that denote a single object (scissors)
    lexicon : frozendict from str to str
        Lexical type of lemmas and multiword lemma sequences
    lemmatizer : callable or None
        `(text, pos) -> lemma`; pos may be None
    """
    @classmethod
    def load(cls, wordlist_dir=None, lexicon_dir=None, lemmatizer=None):
        """
        Read the word lists in the given directories (or the defaults
        shipped with this package)

        Raises
        ------
        ConfigurationError
            If a word list is missing or malformed
        """
        wordlist_dir = wordlist_dir or DEFAULT_WORDLIST_DIR
        lexicon_dir = lexicon_dir or DEFAULT_LEXICON_DIR
        fields = {}
        for field, fname in _PLAIN_LISTS.items():
            fields[field] = _load(read_word_list, join(wordlist_dir, fname))
        for field, (fname, required) in _COUNTED_LISTS.items():
            fields[field] = _load(read_counted_list,
                                  join(wordlist_dir, fname), required)
        fields['pronouns'] = _load(read_pronoun_list,
                                   join(wordlist_dir, _PRONOUN_LIST))
        lex_files = dict((t, join(lexicon_dir, t + '.txt'))
                         for t in LEXICAL_TYPES)
        fields['lexicon'] = _load(read_lexicon, lex_files)
        fields['lemmatizer'] = lemmatizer
        return cls(**fields)

    def with_lemmatizer(self, lemmatizer):
        """
        A copy of these resources using a different lemmatizer
        """
        return self._replace(lemmatizer=lemmatizer)

    def lemmatize(self, text, pos=None):
        """
        Lemma for the given token text and part of speech

        Raises
        ------
        ConfigurationError
            If these resources were built without a lemmatizer
        """
        if self.lemmatizer is None:
            raise ConfigurationError("No lemmatizer configured; build your "
                                     "LinguisticResources with one")
        return self.lemmatizer(text, pos)

    def pronoun(self, text):
        """
        The pronoun table entry for this text (case insensitive),
        or None if it is not a known pronoun
        """
        if text is None:
            return None
        return self.pronouns.get(text.lower().strip())

    def pronoun_for(self, tokens):
        """
        The pronoun table entry for a mention with the given tokens:
        we look up the whole text first, then the head (last token)
        lemma and text. None if the mention is not a pronoun
        """
        if not tokens:
            return None
        head = tokens[-1]
        return self.pronoun(' '.join(t.text for t in tokens)) or\
            self.pronoun(head.lemma) or self.pronoun(head.text)

    def is_article(self, word):
        "True if the word is an article"
        return word.lower() in self.articles

    def collective_count(self, lemma):
        """
        Fixed count of a collective noun, None if it has none or
        is not a collective at all
        """
        return self.collectives.get(lemma.lower())

    def is_collective(self, lemma):
        "True if the lemma is a collective noun"
        return lemma.lower() in self.collectives
