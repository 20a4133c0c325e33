#!/usr/bin/env python
# -*- coding: utf-8 -*-

# License: BSD3

"""
Cheap and cheerful word list formats for the closed vocabularies used by
cardinality inference and mention typing.

One entry per line, blanks and lines starting with `#` ignored. Fields are
separated by colons. There are three flavours:

 * plain lists, one word (or multiword expression) per line ::

       scissors
       sunglasses

 * counted lists, associating a word with an optional integer ::

       several:3
       dozen:12
       group:

 * the pronoun table, associating a pronoun with its type, its
   plurality (singular/plural) and whether it normally refers to
   a person ::

       he:subjective:singular:person
       it:special:singular:
       each other:reciprocal:plural:
"""

from collections import defaultdict, namedtuple
import codecs
from enum import Enum
import sys

from frozendict import frozendict


class WordListError(Exception):
    """
    Malformed entries in one of our word lists
    """
    def __init__(self, *args, **kw):
        super(WordListError, self).__init__(*args, **kw)


class PronounType(Enum):
    """
    Coarse pronoun taxonomy; which words fall in which class is
    decided by the pronoun word list, not here
    """
    SUBJECTIVE = 'subjective'
    OBJECTIVE = 'objective'
    REFLEXIVE = 'reflexive'
    RECIPROCAL = 'reciprocal'
    RELATIVE = 'relative'
    DEMONSTRATIVE = 'demonstrative'
    INDEFINITE = 'indefinite'
    SPECIAL = 'special'
    NONE = 'none'


def _entries(stream):
    "non-blank, non-comment lines of a word list stream, stripped"
    for line in stream:
        line = line.strip()
        if line and not line.startswith('#'):
            yield line


class PronounEntry(namedtuple("PronounEntry",
                              "word ptype plural person")):
    "a single entry in the pronoun table"

    @classmethod
    def read_entry(cls, line):
        """
        Return a PronounEntry given the string corresponding to an entry,
        or raise an exception if we can't parse it
        """
        fields = line.split(':')
        if len(fields) != 4:
            oops = "Sorry, I didn't understand this pronoun entry: %s" % line
            raise WordListError(oops)
        [word, ptype, plurality, person] = fields
        try:
            ptype = PronounType(ptype)
        except ValueError:
            raise WordListError("Unknown pronoun type in entry: %s" % line)
        if plurality not in ('singular', 'plural'):
            raise WordListError("Unknown plurality in entry: %s" % line)
        return cls(word.lower(), ptype, plurality == 'plural',
                   person == 'person')


def read_word_list(filename):
    """
    Read a plain word list into a frozenset of lowercased entries

    :: FilePath -> IO (FrozenSet String)
    """
    with codecs.open(filename, 'r', 'utf-8') as stream:
        return frozenset(x.lower() for x in _entries(stream))


def read_counted_list(filename, required=False):
    """
    Read a counted word list into a frozendict from word to count
    (None for entries without a count, unless `required`, in which
    case these are errors)

    :: FilePath -> IO (Dict String (Maybe Int))
    """
    res = {}
    with codecs.open(filename, 'r', 'utf-8') as stream:
        for line in _entries(stream):
            word, _, count = line.partition(':')
            count = count.strip()
            if count and not count.isdigit():
                oops = "Sorry, I didn't understand this entry: %s" % line
                raise WordListError(oops)
            if required and not count:
                raise WordListError("Missing count in entry: %s" % line)
            res[word.strip().lower()] = int(count) if count else None
    return frozendict(res)


def read_pronoun_list(filename):
    """
    Read the pronoun table into a frozendict from word to PronounEntry
    """
    with codecs.open(filename, 'r', 'utf-8') as stream:
        entries = [PronounEntry.read_entry(x) for x in _entries(stream)]
    return frozendict((e.word, e) for e in entries)


def read_lexicon(filenames):
    """
    Read a lexical type lexicon, given a dictionary from lexical type
    to the word list file for that type.

    A lemma may belong to several types; these are joined with a slash
    in alphabetical order (eg. `people/animals` would come out as
    `animals/people`).

    :: Dict String FilePath -> IO (Dict String String)
    """
    lemma_types = defaultdict(set)
    for ltype, filename in filenames.items():
        for lemma in read_word_list(filename):
            lemma_types[lemma].add(ltype)
    return frozendict((k, '/'.join(sorted(v)))
                      for k, v in lemma_types.items())


if __name__ == "__main__":
    for entry in read_pronoun_list(sys.argv[1]).values():
        print("{word}\t[{ptype}]".format(word=entry.word,
                                          ptype=entry.ptype.value))
