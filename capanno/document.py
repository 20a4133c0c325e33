# License: BSD3

"""
Documents: all the captions for a single image, with the coreference
chains that link their mentions, and the image bounding boxes those
chains are tied to.

Chains only know the keys `(cap_idx, mention_idx)` of their mentions
and the ids of their boxes; the document is what you ask to turn these
into actual mentions and boxes.
"""

import itertools
import re
import warnings

from .annotation import (StructuralInvariantViolation,
                         find_index, insert_annotation)
from .cardinality import approx_equal, unify
from .lexicon.wordlist import PronounType
from .mention import is_nonvisual_chain, lexical_type_match


class BoundingBox(object):
    """
    A rectangle in the image, in pixel coordinates
    """
    def __init__(self, idx, xmin, ymin, xmax, ymax):
        self.idx = idx
        self.xmin = xmin
        self.ymin = ymin
        self.xmax = xmax
        self.ymax = ymax
        if self.area() < 0:
            warnings.warn('Bounding box %d has negative area (%s)' %
                          (idx, self.coordinates()))

    def coordinates(self):
        "`(xmin, ymin, xmax, ymax)`"
        return (self.xmin, self.ymin, self.xmax, self.ymax)

    def __eq__(self, other):
        return isinstance(other, BoundingBox) and\
            self.idx == other.idx and\
            self.coordinates() == other.coordinates()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((self.idx,) + self.coordinates())

    def __repr__(self):
        return 'BoundingBox(%d, %d, %d, %d, %d)' %\
            ((self.idx,) + self.coordinates())

    def width(self):
        "horizontal extent"
        return self.xmax - self.xmin

    def height(self):
        "vertical extent"
        return self.ymax - self.ymin

    def area(self):
        "width times height"
        return self.width() * self.height()

    def same_coordinates(self, other):
        "True if the two boxes cover exactly the same rectangle"
        return self.coordinates() == other.coordinates()

    def iou(self, other):
        """
        Intersection over union of two boxes (0 if they do not meet)
        """
        width = min(self.xmax, other.xmax) - max(self.xmin, other.xmin)
        height = min(self.ymax, other.ymax) - max(self.ymin, other.ymin)
        if width <= 0 or height <= 0:
            return 0.0
        inter = width * height
        union = self.area() + other.area() - inter
        return float(inter) / union if union > 0 else 0.0


class Chain(object):
    """
    A coreference chain: the mentions (by key) that refer to the
    same thing, and the boxes (by id) that show it.

    `is_scene` marks chains that refer to the whole scene;
    `is_orig_nobox` chains that were annotated as having no box
    """
    def __init__(self, doc_id, chain_id):
        self.doc_id = doc_id
        self.chain_id = chain_id
        self.mention_keys = set()
        self.box_ids = set()
        self.is_scene = False
        self.is_orig_nobox = False

    def unique_id(self):
        "docID;chain:ID"
        return '%s;chain:%s' % (self.doc_id, self.chain_id)

    def __str__(self):
        return self.unique_id()

    def add_mention(self, key):
        "record a mention, by its `(cap_idx, mention_idx)` key"
        self.mention_keys.add(key)

    def add_box(self, box_id):
        "record a bounding box, by its id"
        self.box_ids.add(box_id)

    def has_boxes(self):
        "True if the chain is tied to any bounding box"
        return bool(self.box_ids)


# ---------------------------------------------------------------------
# mention pairs
# ---------------------------------------------------------------------

def mention_pair_str(mention1, mention2):
    """
    Identifier for an ordered pair of mentions from the same
    document ::

        doc:1000092795.jpg;caption_1:0;mention_1:1;caption_2:3;mention_2:0
    """
    return 'doc:%s;caption_1:%d;mention_1:%d;caption_2:%d;mention_2:%d' %\
        (mention1.doc_id, mention1.cap_idx, mention1.idx,
         mention2.cap_idx, mention2.idx)


def read_mention_pair_str(pair_str):
    """
    `(doc_id, key1, key2)` from a mention pair identifier (see
    `mention_pair_str`), the keys being `(cap_idx, mention_idx)`

    Raises
    ------
    ValueError
        If this is not a mention pair identifier
    """
    fields = {}
    for item in pair_str.strip().split(';'):
        key, sep, val = item.partition(':')
        if not sep:
            raise ValueError('Bad mention pair id: %s' % pair_str)
        fields[key] = val
    try:
        return (fields['doc'],
                (int(fields['caption_1']), int(fields['mention_1'])),
                (int(fields['caption_2']), int(fields['mention_2'])))
    except (KeyError, ValueError):
        raise ValueError('Bad mention pair id: %s' % pair_str)


# ---------------------------------------------------------------------
# helpers for subsets and coverage
# ---------------------------------------------------------------------

# chunk type strings (see `Caption.to_chunk_type_string`)
_APPOSITIVE = re.compile(r'NP , (NP (VP |ADJP |PP |and )*)+,.*$')
_LIST = re.compile(r'NP , (NP ,?)* and NP.*$')


def _split_phrases(tokens):
    """
    Split a list of tokens on commas and "and" (leading and
    trailing commas are dropped)
    """
    res = [[]]
    for tok in tokens:
        if tok.text in (',', 'and'):
            res.append([])
        else:
            res[-1].append(tok)
    return [x for x in res if x]


def _union_length(intervals):
    "total length covered by some `(start, end)` intervals"
    res = 0
    current = None
    for start, end in sorted(intervals):
        if current is None or start > current[1]:
            if current is not None:
                res += current[1] - current[0]
            current = [start, end]
        else:
            current[1] = max(current[1], end)
    if current is not None:
        res += current[1] - current[0]
    return res


def _transitive_closure(pairs):
    "smallest transitive (and irreflexive) relation including these pairs"
    res = set(pairs)
    while True:
        extra = set((a, d) for a, b in res for c, d in res
                    if b == c and a != d) - res
        if not extra:
            return res
        res |= extra


class Document(object):
    """
    All the captions for one image.

    Chains are worked out from the captions' mentions when you ask
    for them; mentions whose chain id is "0" (or absent) are
    non-visual and left out
    """
    def __init__(self, doc_id, captions=(), width=None, height=None):
        self.doc_id = doc_id
        self.width = width
        self.height = height
        self.captions = []
        self.boxes = {}
        self._chains = {}
        for caption in captions:
            self.add_caption(caption)

    # ------------------------------------------------------------
    # captions and mentions
    # ------------------------------------------------------------

    def add_caption(self, caption):
        """
        Add a caption, in its place by caption index

        Raises
        ------
        StructuralInvariantViolation
            If we already have a caption with that index
        """
        insert_annotation(self.captions, caption)

    def caption(self, idx):
        "the caption with the given index, or None"
        pos = find_index(self.captions, idx)
        return None if pos is None else self.captions[pos]

    def mentions(self):
        "all mentions, by caption and then position in the caption"
        return [m for c in self.captions for m in c.mentions]

    def mention(self, key):
        """
        The mention with the given `(cap_idx, mention_idx)` key

        Raises
        ------
        KeyError
        """
        cap_idx, m_idx = key
        caption = self.caption(cap_idx)
        pos = None if caption is None else find_index(caption.mentions,
                                                      m_idx)
        if pos is None:
            raise KeyError('No mention %s in %s' % (key, self.doc_id))
        return caption.mentions[pos]

    # ------------------------------------------------------------
    # chains
    # ------------------------------------------------------------

    def _add_to_chains(self, caption):
        for mention in caption.mentions:
            if is_nonvisual_chain(mention.chain_id):
                continue
            chain = self._chains.get(mention.chain_id)
            if chain is None:
                chain = Chain(self.doc_id, mention.chain_id)
                self._chains[mention.chain_id] = chain
            chain.add_mention(mention.key())

    @property
    def chains(self):
        """
        dict from chain id to `Chain`.

        Mentions added to our captions since the last time we were
        asked are picked up here; boxes and flags already set on a
        chain are kept
        """
        for caption in self.captions:
            self._add_to_chains(caption)
        return self._chains

    def chain(self, chain_id):
        """
        The chain with the given id

        Raises
        ------
        StructuralInvariantViolation
            If no (visual) mention belongs to that chain
        """
        chain = self.chains.get(chain_id)
        if chain is None or not chain.mention_keys:
            raise StructuralInvariantViolation('Chain %s has no mentions in '
                                               '%s' % (chain_id, self.doc_id))
        return chain

    def chain_mentions(self, chain_id):
        "the mentions in a chain, in document order"
        return [self.mention(k)
                for k in sorted(self.chain(chain_id).mention_keys)]

    def unified_cardinality(self, chain_id):
        """
        The most specific cardinality of the mentions in a chain
        (see `capanno.cardinality.unify`)
        """
        cards = [m.cardinality for m in self.chain_mentions(chain_id)]
        res = cards[0]
        for card in cards[1:]:
            res = unify(res, card)
        return res

    def has_unifiable_cardinalities(self, chain_id):
        """
        True if the mentions in a chain could all refer to the
        same number of things
        """
        cards = [m.cardinality for m in self.chain_mentions(chain_id)]
        return all(approx_equal(c1, c2)
                   for c1, c2 in itertools.combinations(cards, 2))

    # ------------------------------------------------------------
    # bounding boxes
    # ------------------------------------------------------------

    def _known_chains(self, chain_ids, what):
        res = []
        for chain_id in chain_ids:
            if chain_id in self.chains:
                res.append(self.chains[chain_id])
            else:
                warnings.warn('%s: %s names unknown chain %s' %
                              (self.doc_id, what, chain_id))
        return res

    def add_bounding_box(self, box, chain_ids):
        """
        Tie a bounding box to each of the given chains. Chains we do
        not know about are skipped (with a warning)
        """
        self.boxes[box.idx] = box
        for chain in self._known_chains(chain_ids, 'box %d' % box.idx):
            chain.add_box(box.idx)

    def set_scene_chains(self, chain_ids):
        "mark the given chains as referring to the whole scene"
        for chain in self._known_chains(chain_ids, 'scene flag'):
            chain.is_scene = True

    def set_orig_nobox_chains(self, chain_ids):
        "mark the given chains as originally annotated without a box"
        for chain in self._known_chains(chain_ids, 'nobox flag'):
            chain.is_orig_nobox = True

    def bounding_boxes(self):
        "all bounding boxes, by id"
        return [self.boxes[k] for k in sorted(self.boxes)]

    def boxes_for_mention(self, mention):
        "the boxes tied to a mention's chain (empty if none)"
        chain = self.chains.get(mention.chain_id)
        if chain is None:
            return []
        return [self.boxes[k] for k in sorted(chain.box_ids)]

    def mentions_for_box(self, box):
        "the mentions of all chains tied to the given box"
        keys = set()
        for chain in self.chains.values():
            if box.idx in chain.box_ids:
                keys.update(chain.mention_keys)
        return [self.mention(k) for k in sorted(keys)]

    def load_boxes_from(self, other):
        """
        Copy image size, boxes and chain flags over from another
        version of this document (as read from an entities file, say).
        Chains the other document has but we do not are dropped
        """
        self.width = other.width
        self.height = other.height
        for chain_id, theirs in other.chains.items():
            ours = self.chains.get(chain_id)
            if ours is None:
                continue
            for box_id in theirs.box_ids:
                self.boxes[box_id] = other.boxes[box_id]
                ours.add_box(box_id)
            ours.is_scene = theirs.is_scene
            ours.is_orig_nobox = theirs.is_orig_nobox

    @staticmethod
    def _proper_subset(boxes1, boxes2):
        return bool(boxes1) and boxes1 < boxes2

    def boxes_are_subset(self, mention1, mention2):
        """
        True if the boxes of the first mention are a (non-empty)
        proper subset of those of the second
        """
        boxes1 = set(b.idx for b in self.boxes_for_mention(mention1))
        boxes2 = set(b.idx for b in self.boxes_for_mention(mention2))
        return self._proper_subset(boxes1, boxes2)

    def box_subset_chains(self):
        """
        `(sub, super)` chain id pairs where the boxes of the first
        chain are a proper subset of those of the second. Proper
        subset being transitive, so is this relation
        """
        res = []
        for sub, sup in itertools.permutations(sorted(self.chains), 2):
            if self._proper_subset(self.chains[sub].box_ids,
                                   self.chains[sup].box_ids):
                res.append((sub, sup))
        return res

    def _of_subsets(self, caption):
        """
        "X of Y" where Y is coreferent with the first mention of the
        caption: X is part of both
        """
        mentions = caption.mentions
        first = mentions[0]
        res = []
        for mention, following in zip(mentions[1:], mentions[2:]):
            between = caption.interstitial_tokens(mention, following)
            if [t.text for t in between] == ['of'] and\
               following.chain_id == first.chain_id:
                res.append((mention, following))
                res.append((mention, first))
        return res

    def _appositive_subsets(self, caption, resources):
        """
        Appositives ("NP , NP , VP", but not lists): the mentions
        between the first mention and the first verb phrase are part
        of the first mention (if they could be the same kind of thing)
        """
        chunk_str = caption.to_chunk_type_string()
        if not _APPOSITIVE.match(chunk_str) or _LIST.match(chunk_str):
            return []
        first = caption.mentions[0]
        verbs = [c for c in caption.chunks if c.chunk_type == 'VP']
        if not first.chunks or not verbs:
            return []
        res = []
        between = caption.interstitial_tokens(first.chunks[-1], verbs[0])
        for phrase in _split_phrases(between):
            mention = caption.mention_of(phrase[0])
            if mention is None:
                continue
            if lexical_type_match(first, mention) > 0 or\
               mention.pronoun_type(resources) != PronounType.NONE or\
               first.pronoun_type(resources) != PronounType.NONE:
                res.append((mention, first))
        return res

    def wording_subset_chains(self, resources):
        """
        `(sub, super)` chain id pairs suggested by the way the
        captions are worded, whatever the boxes say (see
        `subset_chains`). Non-visual and coreferent mentions are
        left out
        """
        res = set()
        for caption in self.captions:
            if not caption.mentions:
                continue
            pairs = self._of_subsets(caption) +\
                self._appositive_subsets(caption, resources)
            for sub, sup in pairs:
                if sub.is_visual() and sup.is_visual() and\
                   sub.chain_id != sup.chain_id:
                    res.add((sub.chain_id, sup.chain_id))
        return sorted(res)

    def subset_chains(self, resources):
        """
        `(sub, super)` chain id pairs in the subset relation: those
        from the boxes (`box_subset_chains`), and those from the
        wording of the captions (`wording_subset_chains`) unless the
        boxes say the opposite. The result is closed under
        transitivity
        """
        pairs = set(self.box_subset_chains())
        for sub, sup in self.wording_subset_chains(resources):
            if (sup, sub) not in pairs:
                pairs.add((sub, sup))
        return sorted(_transitive_closure(pairs))

    def subset_mentions(self, resources):
        """
        Identifiers (see `mention_pair_str`) for the `(sub, super)`
        mention pairs whose chains are in the subset relation
        """
        res = set()
        for sub, sup in self.subset_chains(resources):
            for mention1 in self.chain_mentions(sub):
                for mention2 in self.chain_mentions(sup):
                    res.add(mention_pair_str(mention1, mention2))
        return sorted(res)

    def mention_pair(self, pair_str):
        """
        The two mentions named by a mention pair identifier (see
        `mention_pair_str`)

        Raises
        ------
        ValueError
            If the identifier is malformed or for another document
        KeyError
            If we have no such mentions
        """
        doc_id, key1, key2 = read_mention_pair_str(pair_str)
        if doc_id != self.doc_id:
            raise ValueError('Mention pair %s is not from %s' %
                             (pair_str, self.doc_id))
        return self.mention(key1), self.mention(key2)

    def area(self):
        "area of the image (None if we do not know its size)"
        if self.width is None or self.height is None:
            return None
        return self.width * self.height

    def box_coverage(self):
        """
        Fraction (0 to 1) of the image covered by the boxes of our
        chains, None if we do not know the image size
        """
        area = self.area()
        if not area:
            return None
        rects = set()
        for chain in self.chains.values():
            for box_id in chain.box_ids:
                box = self.boxes[box_id]
                rect = (max(box.xmin, 0), max(box.ymin, 0),
                        min(box.xmax, self.width),
                        min(box.ymax, self.height))
                if rect[0] < rect[2] and rect[1] < rect[3]:
                    rects.add(rect)
        xs = sorted(set(x for r in rects for x in (r[0], r[2])))
        covered = 0
        for left, right in zip(xs, xs[1:]):
            column = [(r[1], r[3]) for r in rects
                      if r[0] <= left and r[2] >= right]
            covered += (right - left) * _union_length(column)
        return float(covered) / area

    # ------------------------------------------------------------
    # output
    # ------------------------------------------------------------

    def _token_chain_maps(self, chains):
        res = {}
        for chain_id, keys in chains.items():
            for key in keys:
                mention = self.mention(key)
                tmap = res.setdefault(mention.cap_idx, {})
                for tok in mention.tokens:
                    tmap[tok.idx] = chain_id
        return res

    def coref_strings(self, predicted_chains=None):
        """
        The captions in the coreference format, one string each.

        :param predicted_chains: if given, a dict from chain id to the
                                 mention keys in that chain, to be
                                 written out in place of our own
                                 chain ids
        """
        if predicted_chains is None:
            return [c.to_coref_string() for c in self.captions]
        tmaps = self._token_chain_maps(predicted_chains)
        return [c.to_coref_string(chain_map=tmaps.get(c.idx, {}))
                for c in self.captions]

    def to_conll2012(self, chains=None):
        """
        The document in the CoNLL-2012 coreference format, one line per
        token, with the coreference column filled in from the given
        chains (dict from chain id to mention keys; by default, our
        own visual chains)
        """
        if chains is None:
            chains = dict((k, v.mention_keys)
                          for k, v in self.chains.items())
        starts = {}
        ends = {}
        for chain_id, keys in chains.items():
            for key in keys:
                mention = self.mention(key)
                starts[(mention.cap_idx, mention.span.first())] = chain_id
                ends[(mention.cap_idx, mention.span.last())] = chain_id
        lines = []
        word_num = 0
        for caption in self.captions:
            for tok in caption.tokens:
                tkey = (caption.idx, tok.idx)
                if tkey in starts and tkey in ends:
                    coref = '(%s)' % starts[tkey]
                elif tkey in starts:
                    coref = '(%s' % starts[tkey]
                elif tkey in ends:
                    coref = '%s)' % ends[tkey]
                else:
                    coref = '-'
                fields = [self.doc_id, '0', str(word_num), tok.text,
                          tok.pos or '-'] + ['-'] * 7 + [coref]
                lines.append('\t'.join(fields))
                word_num += 1
        return lines
