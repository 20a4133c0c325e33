# License: BSD3

"""
Mention cardinalities: how many things does a mention denote?

We model a quantity as some number of sets, each holding some number
of elements (so "two teams" is 2 sets of at least 1 element each).
Either count may be ambiguous, which we read as "more than", and is
written with a trailing `+` in the compact string form ::

    1|1     a dog
    1|2     two dogs, a pair of scissors
    2|1+    two teams
    1|2+    several dogs
    mass    water

Mentions which do not denote anything countable (non-visual heads
like "time", "view") get no cardinality at all, which we represent
with None.

`infer_cardinality` guesses a cardinality from a mention's tokens;
`unify` and `approx_equal` compare cardinalities across coreferent
mentions.
"""

import funcparserlib.parser as fp


class Cardinality(object):
    """
    A count of sets and elements, each of which may be ambiguous,
    or else the mass cardinality (see `MASS`)

    Attributes
    ----------
    set_count : int
        Number of sets (lower bound, minus one, if ambiguous)
    elem_count : int
        Number of elements in each set (ditto)
    set_ambiguous : bool
    elem_ambiguous : bool
    is_mass : bool
        True only for the mass cardinality
    """
    def __init__(self, set_count, elem_count,
                 set_ambiguous=False, elem_ambiguous=False,
                 is_mass=False):
        self.set_count = set_count
        self.elem_count = elem_count
        self.set_ambiguous = set_ambiguous
        self.elem_ambiguous = elem_ambiguous
        self.is_mass = is_mass

    def _key(self):
        if self.is_mass:
            return ('mass',)
        return (self.set_count, self.set_ambiguous,
                self.elem_count, self.elem_ambiguous)

    def __eq__(self, other):
        return isinstance(other, Cardinality) and self._key() == other._key()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        if self.is_mass:
            return 'mass'
        return '%d%s|%d%s' % (self.set_count,
                              '+' if self.set_ambiguous else '',
                              self.elem_count,
                              '+' if self.elem_ambiguous else '')

    def __repr__(self):
        return 'Cardinality(%s)' % self

    def is_ambiguous(self):
        """
        True if either count is only a lower bound
        """
        return self.set_ambiguous or self.elem_ambiguous

    def value(self):
        """
        Number of elements denoted (the set count times the element
        count), or its lower bound if the cardinality is ambiguous.
        Ambiguous counts are incremented before multiplying, so that
        "two teams" (`2|1+`) has a lower bound of 4.

        The mass cardinality has no value (None)
        """
        if self.is_mass:
            return None
        sets = self.set_count + 1 if self.set_ambiguous else self.set_count
        elems = self.elem_count + 1 if self.elem_ambiguous\
            else self.elem_count
        return sets * elems

    @classmethod
    def from_string(cls, text):
        """
        Read the compact `T|U` form (either component optionally
        followed by `+`) or `mass`

        Raises
        ------
        ValueError
            If the string is not a cardinality
        """
        text = text.strip()
        if text == 'mass':
            return MASS
        try:
            ((sets, set_amb), (elems, elem_amb)) = _CARDINALITY.parse(text)
        except fp.NoParseError as oops:
            raise ValueError('Not a cardinality: %r (%s)' % (text, oops))
        return cls(sets, elems, set_amb, elem_amb)


MASS = Cardinality(0, 0, is_mass=True)
"""
The cardinality of mass nouns ("water", "snow")
"""


# ---------------------------------------------------------------------
# compact string form
# ---------------------------------------------------------------------

_NAT = fp.oneplus(fp.some(lambda c: c.isdigit())) >>\
    (lambda ds: int(''.join(ds)))
_PLUS = fp.maybe(fp.a('+')) >> (lambda x: x is not None)
_COMPONENT = _NAT + _PLUS >> tuple
_CARDINALITY = _COMPONENT + fp.skip(fp.a('|')) + _COMPONENT +\
    fp.skip(fp.finished)


# ---------------------------------------------------------------------
# combinators
# ---------------------------------------------------------------------

def unify(card1, card2):
    """
    The more specific of two cardinalities, meaning the one which
    refers to the smaller quantity.

    * no cardinality (None) yields to anything
    * mass yields to anything countable
    * an unambiguous cardinality beats an ambiguous one; between
      two unambiguous ones we take the smaller
    * between two ambiguous cardinalities we take the larger
      lower bound
    """
    if card1 is None or card2 is None:
        return card2 if card1 is None else card1
    if card1.is_mass:
        return card2
    if card2.is_mass:
        return card1
    if not card1.is_ambiguous() and not card2.is_ambiguous():
        return card1 if card1.value() < card2.value() else card2
    elif not card1.is_ambiguous():
        return card1
    elif not card2.is_ambiguous():
        return card2
    return card2 if card1.value() < card2.value() else card1


def approx_equal(card1, card2):
    """
    True if the two cardinalities could refer to the same quantity:

    * either is mass
    * both are unambiguous and have the same value
    * both are ambiguous
    * one is ambiguous and its lower bound does not exceed the
      value of the other

    No cardinality (None) is only approximately equal to itself
    """
    if card1 is None or card2 is None:
        return card1 is None and card2 is None
    if card1.is_mass or card2.is_mass:
        return True
    if not card1.is_ambiguous() and not card2.is_ambiguous():
        return card1.value() == card2.value()
    elif card1.is_ambiguous() and card2.is_ambiguous():
        return True
    elif card1.is_ambiguous():
        return card1.value() <= card2.value()
    else:
        return card2.value() <= card1.value()


# ---------------------------------------------------------------------
# inference
# ---------------------------------------------------------------------

_PLURAL_TAGS = frozenset(['NNS', 'NNPS'])
_RANGE_WORDS = frozenset(['to', 'or'])
_YEARS = range(1900, 2101)


def _text(token):
    return token.text.lower()


def _lemma(token):
    return (token.lemma or token.text).lower()


def is_plural(token):
    """
    True if the token looks like a plural noun: tagged as one or,
    when we have no tag, with a lemma shorter than its text
    """
    if token.pos is not None:
        return token.pos in _PLURAL_TAGS
    text = _text(token)
    return text.endswith('s') and _lemma(token) != text


def _simple_numeral(word, resources):
    word = word.replace(',', '')
    if word.isdigit():
        return int(word)
    return resources.numerals.get(word)


def read_numeral(word, resources):
    """
    `(value, is_range)` for a numeral token (spelled out, digits,
    hyphenated compounds like "twenty-one", or hyphenated ranges like
    "5-6"), None if the word is not a numeral.

    A range is read as its lower bound
    """
    word = word.lower()
    value = _simple_numeral(word, resources)
    if value is not None:
        return value, False
    if '-' in word:
        left, _, right = word.partition('-')
        lval = _simple_numeral(left, resources)
        rval = _simple_numeral(right, resources)
        if lval is None or rval is None:
            return None
        if not left.isdigit() and lval >= 20 and lval % 10 == 0 and\
           0 < rval < 10:
            return lval + rval, False
        return min(lval, rval), True
    return None


def _plural_numeral(word, resources):
    """
    value of a plural number word ("hundreds", "dozens"), or None
    """
    word = word.lower()
    if not word.endswith('s') or len(word) < 3:
        return None
    stem = word[:-1]
    if stem in resources.numerals:
        return resources.numerals[stem]
    return resources.collective_count(stem)


def _is_year(token, value):
    return len(token.text) == 4 and value in _YEARS


def _quantity(tokens, resources, start=0):
    """
    First count expressed in the tokens, as a triple
    `(value, is_ambiguous, is_plural_numeral)`, or None.

    Numerals count as is, unless they are the start of a range ("five
    to six", "five or six", "5-6"), in which case we count them as one
    less than the lower bound and ambiguous. Quantifier words are
    likewise decremented and ambiguous ("several" -> 2+)
    """
    for i in range(start, len(tokens)):
        tok = tokens[i]
        word = _text(tok)
        num = read_numeral(word, resources)
        if num is not None:
            value, is_range = num
            if _is_year(tok, value):
                continue
            if not is_range and i + 2 < len(tokens) and\
               _text(tokens[i + 1]) in _RANGE_WORDS:
                upper = read_numeral(_text(tokens[i + 2]), resources)
                is_range = upper is not None and not upper[1]
                if is_range:
                    value = min(value, upper[0])
            if is_range:
                return max(value - 1, 0), True, False
            return value, False, False
        plural_num = _plural_numeral(word, resources)
        if plural_num is not None:
            return plural_num, False, True
        if word in resources.quantifiers:
            return resources.quantifiers[word] - 1, True, False
    return None


def _split_of(tokens):
    "position of the first interior 'of', None if there is none"
    for i in range(1, len(tokens) - 1):
        if _text(tokens[i]) == 'of':
            return i
    return None


def _infer_collective(tokens, resources):
    """
    Collective heads ("team", "group", "pair") denote one set of at
    least one element, unless the modifiers or the head itself
    tell us more
    """
    head = tokens[-1]
    card = Cardinality(1, 1, elem_ambiguous=True)
    fixed = resources.collective_count(_lemma(head))
    if fixed is not None:
        card.elem_count = fixed
        card.elem_ambiguous = False
    quantity = _quantity(tokens[:-1], resources)
    if quantity is not None:
        value, ambiguous, plural_num = quantity
        card.set_count = 1 if plural_num else value
        card.set_ambiguous = ambiguous or plural_num
    elif is_plural(head):
        card.set_ambiguous = True
    return card


def _infer_default(tokens, resources):
    """
    Ordinary count nouns: one set, whose size comes from the numerals,
    collective modifiers ("a dozen eggs"), quantifier words, or
    failing all of these, the plural marking of the head
    """
    head = tokens[-1]
    card = Cardinality(1, 1)
    quantity = _quantity(tokens, resources)
    if quantity is None:
        for tok in tokens[:-1]:
            fixed = resources.collective_count(_lemma(tok))
            if fixed is not None:
                quantity = fixed, False, False
                break
    if quantity is not None:
        value, ambiguous, plural_num = quantity
        card.elem_count = value
        card.elem_ambiguous = ambiguous
        if plural_num:
            card.set_ambiguous = True
    elif is_plural(head):
        card.elem_ambiguous = True
    return card


def _has_numeral(tokens, resources):
    return any(read_numeral(_text(t), resources) is not None
               for t in tokens)


def _combine_of(xtoks, ytoks, resources):
    """
    Cardinality of "X of Y", from those of X and Y
    """
    xcard = infer_cardinality(xtoks, resources)
    ycard = infer_cardinality(ytoks, resources)
    if xcard is None or ycard is None:
        return ycard if xcard is None else xcard
    if ycard.is_mass:
        return xcard
    if xcard.is_mass:
        return MASS
    yhead = ytoks[-1]
    if _lemma(yhead) in resources.singular_artifacts or\
       _text(yhead) in resources.singular_artifacts:
        return xcard
    xhead = _lemma(xtoks[-1])
    if resources.is_collective(xhead):
        fixed = resources.collective_count(xhead)
        if _has_numeral(ytoks, resources) or\
           (fixed is None and is_plural(ytoks[-1])):
            return Cardinality(xcard.set_count, ycard.elem_count,
                               xcard.set_ambiguous, ycard.elem_ambiguous)
        return Cardinality(xcard.set_count, xcard.elem_count,
                           xcard.set_ambiguous, xcard.elem_ambiguous)
    return xcard


def infer_cardinality(tokens, resources):
    """
    Guess the cardinality of a mention from its tokens (anything with
    `text`, `lemma` and `pos` attributes). The last token is taken to
    be the head. We apply the first of these rules that fits:

    1. "X of Y": combine the cardinalities of X and Y
    2. pronouns: `1|1` if singular, `1|0+` if plural
    3. non-visual heads: None
    4. mass heads with no article, or in the plural: mass
    5. collective heads: `1|1+`, refined by the modifiers
    6. everything else: numerals, quantifiers and plural marking

    :type resources: `LinguisticResources`
    :rtype: `Cardinality` or None
    """
    tokens = list(tokens)
    if not tokens:
        return None
    head = tokens[-1]
    of_idx = _split_of(tokens)
    if of_idx is not None:
        return _combine_of(tokens[:of_idx], tokens[of_idx + 1:], resources)

    pronoun = resources.pronoun_for(tokens)
    if pronoun is not None:
        if pronoun.plural:
            return Cardinality(1, 0, elem_ambiguous=True)
        return Cardinality(1, 1)

    head_lemma = _lemma(head)
    if head_lemma in resources.nonvisual:
        return None
    if head_lemma in resources.mass:
        has_article = any(resources.is_article(t.text) for t in tokens[:-1])
        if is_plural(head) or not has_article:
            return MASS
    if resources.is_collective(head_lemma):
        return _infer_collective(tokens, resources)
    return _infer_default(tokens, resources)
