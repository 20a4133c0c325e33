# License: BSD3

"""
Lemmatizing with the NLTK WordNet lemmatizer.

`LinguisticResources` wants a lemmatizer that it can call with a
token and its Penn Treebank part of speech tag (or None); WordNet has
its own, much coarser, notion of part of speech, so we translate ::

    res = LinguisticResources.load(lemmatizer=WordNetLemmatizer())

You will need the NLTK `wordnet` data package (see `nltk.download`).
"""

import nltk.stem

from ..lexicon.resources import ConfigurationError


WORDNET_ADJ = 'a'
WORDNET_VERB = 'v'
WORDNET_ADV = 'r'
WORDNET_NOUN = 'n'

_WORDNET_TAGS = {'J': WORDNET_ADJ,
                 'V': WORDNET_VERB,
                 'R': WORDNET_ADV,
                 'N': WORDNET_NOUN}


def wordnet_pos(ptb_tag):
    """
    WordNet part of speech for a Penn Treebank tag; anything that is
    not an adjective, verb or adverb (including no tag at all) is
    treated as a noun
    """
    if not ptb_tag:
        return WORDNET_NOUN
    return _WORDNET_TAGS.get(ptb_tag[0].upper(), WORDNET_NOUN)


class WordNetLemmatizer(object):
    """
    Callable `(text, pos) -> lemma`. Lemmas are lowercased.

    :param lemmatizer: something with a `lemmatize(word, pos)` method,
                       by default an `nltk.stem.WordNetLemmatizer`
    """
    def __init__(self, lemmatizer=None):
        self._lemmatizer = lemmatizer or nltk.stem.WordNetLemmatizer()

    def __call__(self, text, pos=None):
        word = text.lower()
        try:
            return self._lemmatizer.lemmatize(word, wordnet_pos(pos))
        except LookupError as oops:
            raise ConfigurationError("WordNet data not available to the "
                                     "lemmatizer (try nltk.download"
                                     "('wordnet')): %s" % oops)
