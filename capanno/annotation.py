"""
Low-level representation of caption annotations.

Everything we annotate in a caption (tokens, chunks, mentions, and the
captions themselves within a document) is identified by a document id and
an integer index, and lives in a list kept in ascending index order. This
module provides the shared ordering/identity contract, along with a `Span`
over token offsets.

This is low-level in the sense that annotations here make no attempt to
interpret one another. A chunk knows which tokens it covers; it does not
know whether some mention contains it. The `Caption` that owns both
answers those questions.
"""

# License: BSD3

# pylint: disable=too-few-public-methods

from bisect import bisect_left


class StructuralInvariantViolation(Exception):
    """
    An annotation structure that cannot exist: an empty or out of bounds
    token range, an index used twice, a span overlapping a sibling of the
    same kind, a chain without mentions
    """
    def __init__(self, *args, **kw):
        super(StructuralInvariantViolation, self).__init__(*args, **kw)


class Span(object):
    """
    What portion of a caption an annotation corresponds to, in terms
    of token offsets.

    Spans are interpreted the way Python interprets slice indices.
    Think of offsets as sitting in between individual tokens ::

          two   dogs   run
        0     1      2     3

    So `(0,2)` covers "two dogs", and `(2,3)` picks out "run"
    """
    def __init__(self, start, end):
        self.start = start
        self.end = end

    def __str__(self):
        return '(%d,%d)' % (self.start, self.end)

    def __repr__(self):
        return 'Span(%d, %d)' % (self.start, self.end)

    def __lt__(self, other):
        return self.start < other.start or\
            (self.start == other.start and self.end < other.end)

    def __eq__(self, other):
        return isinstance(other, Span) and\
            self.start == other.start and\
            self.end == other.end

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return (self.start, self.end).__hash__()

    def length(self):
        """
        Return the number of tokens covered by this span
        """
        return self.end - self.start

    def first(self):
        "offset of the first token in the span"
        return self.start

    def last(self):
        "offset of the last token in the span (inclusive)"
        return self.end - 1

    def encloses(self, other):
        """
        Return True if this span includes the argument

        Note that `x.encloses(x) == True`

        Corner case: `x.encloses(None) == False`
        """
        if other is None:
            return False
        else:
            return self.start <= other.start and self.end >= other.end

    def overlaps(self, other):
        """
        Return the overlapping region if two spans have tokens in
        common, or else None ::

            Span(0, 3).overlaps(Span(2, 5)) == Span(2, 3)
            Span(0, 3).overlaps(Span(3, 5)) == None
        """
        if other is None:
            return None
        common_start = max(self.start, other.start)
        common_end = min(self.end, other.end)
        if common_start < common_end:
            return Span(common_start, common_end)
        else:
            return None

    def merge(self, other):
        """
        Return a span that stretches from the beginning to the
        end of the two spans.
        """
        return Span(min(self.start, other.start),
                    max(self.end, other.end))

    @classmethod
    def inclusive(cls, first, last):
        """
        Span from a pair of inclusive token indices, as found in
        `gov|rel|dep` style data and database records
        """
        return cls(first, last + 1)


class Annotation(object):
    """Anything with a document id and a position in an ordered list.

    Attributes
    ----------
    doc_id : str
        Identifier of the document (image) this annotation belongs to.
    idx : int
        Position of this annotation in its owning list.
    """
    def __init__(self, doc_id, idx):
        self.doc_id = doc_id
        self.idx = idx

    def __lt__(self, other):
        return self.idx < other.idx

    def unique_id(self):
        """Dataset-unique identifier for this annotation.

        Subclasses must override this.
        """
        raise NotImplementedError()

    def __str__(self):
        return self.unique_id()


def insertion_index(items, item):
    """Position at which to insert `item` in `items` so as to keep
    the list in ascending `idx` order.

    This is a plain bisection on the `idx` attribute: when some
    annotation in the list already carries the same index, the
    position returned is the one just before it. Callers that
    forbid duplicate indices should check for that case with
    `find_index`.

    Parameters
    ----------
    items : list of Annotation
        Annotations, in ascending idx order.
    item : Annotation
        Annotation to insert.

    Returns
    -------
    pos : int
        Insertion position, between 0 and len(items).
    """
    return bisect_left([x.idx for x in items], item.idx)


def find_index(items, idx):
    """Position of the annotation with the given index in a list kept
    in ascending idx order, or None if there is no such annotation.
    """
    keys = [x.idx for x in items]
    pos = bisect_left(keys, idx)
    if pos < len(keys) and keys[pos] == idx:
        return pos
    return None


def insert_annotation(items, item):
    """Insert an annotation in its place in a list kept in ascending
    idx order.

    Raises
    ------
    StructuralInvariantViolation
        If the list already holds an annotation with the same index.
    """
    if find_index(items, item.idx) is not None:
        oops = 'There is already an annotation with index %d (%s)' %\
            (item.idx, item.unique_id())
        raise StructuralInvariantViolation(oops)
    pos = insertion_index(items, item)
    items.insert(pos, item)
    return pos


def is_strictly_ordered(items):
    """True if the indices in the list are strictly increasing and
    equal to the list positions
    """
    return all(x.idx == i for i, x in enumerate(items))
