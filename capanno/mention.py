# License: BSD3

"""
Mentions: referring expressions within a caption, linked across
captions into coreference chains
"""

from .annotation import Annotation
from .lexicon.wordlist import PronounType


NONVISUAL_CHAIN = '0'
"""
Chain id given to mentions which do not refer to anything in the image
"""

OTHER_TYPE = 'other'
"""
Lexical type of mentions whose head is not in the lexicon
"""

_PEOPLE_ANIMALS = frozenset([PronounType.SUBJECTIVE,
                             PronounType.OBJECTIVE,
                             PronounType.REFLEXIVE,
                             PronounType.RECIPROCAL])

_FEMALE_HEADS = frozenset(['she', 'her', 'herself', 'girl', 'woman', 'lady'])
_MALE_HEADS = frozenset(['he', 'him', 'himself', 'boy', 'man', 'guy'])

_NON_MODIFIER_TAGS = frozenset(['DT', 'IN'])


def is_nonvisual_chain(chain_id):
    """
    True if this chain id marks a mention as not referring to
    anything visible (either absent, or the special chain "0")
    """
    return chain_id is None or chain_id == NONVISUAL_CHAIN


def lexical_type_of(tokens, resources):
    """
    Lexical type for a mention with the given tokens.

    Pronouns are typed by the kind of pronoun they are, or as `people`
    if the pronoun table says they refer to persons. Otherwise we
    look for the longest lexicon entry that ends the mention, so that
    "baseball player" and "player" can be told apart. Multiple types
    come out joined with `/`; mentions we cannot place are `other`
    """
    pronoun = resources.pronoun_for(tokens)
    if pronoun is not None:
        if pronoun.ptype in _PEOPLE_ANIMALS:
            return 'people/animals'
        elif pronoun.person:
            return 'people'
        else:
            return OTHER_TYPE
    lemmas = [(t.lemma or t.text).lower() for t in tokens]
    for start in range(len(lemmas)):
        entry = resources.lexicon.get(' '.join(lemmas[start:]))
        if entry is not None:
            return entry
    return OTHER_TYPE


def lexical_type_match(mention1, mention2):
    """
    1 if the two mentions have the same lexical type, 0.5 if they
    have some type in common (`people/animals` vs `animals`), and
    0 otherwise
    """
    if mention1.lexical_type == mention2.lexical_type:
        return 1.0
    types1 = set(mention1.lexical_type.split('/'))
    types2 = set(mention2.lexical_type.split('/'))
    if types1 & types2:
        return 0.5
    return 0.0


class Mention(Annotation):
    """
    A contiguous range of tokens in a caption that refers to
    something (or is at least chunked as though it might).

    Mentions are created by their `Caption` (see
    `Caption.add_mention`), which works out the chunks they overlap.

    Attributes
    ----------
    cap_idx : int
        Index of the caption within its document
    chain_id : str or None
        Coreference chain; "0" or None for non-visual mentions
    span : Span
        Token offsets covered
    tokens : tuple of Token
    chunks : tuple of Chunk
        Chunks overlapping the mention, in order
    lexical_type : str
    cardinality : Cardinality or None
    """
    def __init__(self, doc_id, cap_idx, idx, chain_id, span,
                 tokens, chunks, lexical_type, cardinality):
        super(Mention, self).__init__(doc_id, idx)
        self.cap_idx = cap_idx
        self.chain_id = chain_id
        self.span = span
        self.tokens = tuple(tokens)
        self.chunks = tuple(chunks)
        self.lexical_type = lexical_type
        self.cardinality = cardinality

    def unique_id(self):
        return '%s#%s;mention:%d' % (self.doc_id, self.cap_idx, self.idx)

    def key(self):
        """
        `(cap_idx, idx)`, which identifies the mention within its
        document
        """
        return (self.cap_idx, self.idx)

    @property
    def head(self):
        "the head token (we take the last token to be the head)"
        return self.tokens[-1]

    def token_range(self):
        "inclusive `(first, last)` token offsets"
        return (self.span.first(), self.span.last())

    def text(self):
        "the mention's tokens, separated by spaces"
        return ' '.join(t.text for t in self.tokens)

    def is_visual(self):
        "True if the mention refers to something in the image"
        return not is_nonvisual_chain(self.chain_id)

    def pronoun_type(self, resources):
        """
        What kind of pronoun this mention is (`PronounType.NONE` if
        it is not a pronoun at all). If the whole mention is not in the
        pronoun table, we go by its head
        """
        entry = resources.pronoun_for(self.tokens)
        return PronounType.NONE if entry is None else entry.ptype

    def gender(self):
        """
        `female`, `male` or `neuter`, going by the head lemma and any
        gendered words in the mention
        """
        lemma = (self.head.lemma or self.head.text).lower().strip()
        padded = ' %s ' % self.text().lower().strip()
        if lemma in _FEMALE_HEADS or ' female ' in padded:
            return 'female'
        elif lemma in _MALE_HEADS or ' male ' in padded:
            return 'male'
        elif len(self.tokens) > 1 and ' her ' in padded:
            return 'female'
        elif len(self.tokens) > 1 and ' his ' in padded:
            return 'male'
        return 'neuter'

    def modifiers(self, resources):
        """
        `(numeric, other)`: the words before the head, save determiners
        and prepositions, split into numerals and everything else.
        Each is a space separated string, possibly empty
        """
        numeric = []
        other = []
        for tok in self.tokens[:-1]:
            if tok.pos in _NON_MODIFIER_TAGS:
                continue
            word = ''.join(c for c in tok.text if c.isalnum()).lower()
            if not word:
                continue
            if word.isdigit() or word in resources.numerals:
                numeric.append(word)
            else:
                other.append(word)
        return ' '.join(numeric), ' '.join(other)
