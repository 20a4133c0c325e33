# License: BSD3

"""
Captions: one sentence describing an image, with its tokens, chunks,
mentions and (optionally) dependency tree.

A caption owns its tokens. Chunks and mentions are contiguous ranges
over these tokens; which chunk or mention a token belongs to is not
recorded on the token itself (tokens are immutable) but in two index
maps kept by the caption, filled in once, when the chunk or mention is
added ::

    cap = Caption('1000092795.jpg', 0)
    for word, tag in [('Two', 'CD'), ('dogs', 'NNS'), ('run', 'VBP')]:
        cap.add_token(word, lemma=word.lower(), pos=tag)
    cap.add_chunk(0, 2, 'NP')
    cap.add_chunk(2, 3, 'VP')
    cap.add_mention('5', 0, 2, resources=res)

Captions are normally read from one of the two bracketed text formats
(see `capanno.coref` and `capanno.entities`), or built from tokens
already labelled by some external tagger (`Caption.from_labeled_tokens`).
"""

from collections import namedtuple

from .annotation import (Annotation, Span, StructuralInvariantViolation,
                         find_index, insert_annotation, is_strictly_ordered)
from .cardinality import infer_cardinality
from .deptree import build_dependency_tree
from .lexicon.resources import ConfigurationError
from .mention import Mention, lexical_type_of


class Token(namedtuple('Token', 'doc_id cap_idx idx text lemma pos')):
    """
    A single token. Tokens never change once created; use the owning
    caption to find out what chunk or mention a token belongs to.
    """
    def unique_id(self):
        "dataset-unique identifier for this token"
        return '%s#%s;token:%d' % (self.doc_id, self.cap_idx, self.idx)

    def pos_string(self):
        "`(POS text)`"
        return '(%s %s)' % (self.pos, self.text)

    def __str__(self):
        return self.text


class LabeledToken(namedtuple('LabeledToken',
                              ['text', 'lemma', 'pos',
                               'chunk_idx', 'mention_idx',
                               'chunk_type', 'chain_id'])):
    """
    A token as labelled by some external tagger/chunker/coreference
    system; any field but the text may be None. Tokens that share a
    `chunk_idx` (resp. `mention_idx`) are taken to be in the same chunk
    (resp. mention)
    """
    def __new__(cls, text, lemma=None, pos=None,
                chunk_idx=None, mention_idx=None,
                chunk_type=None, chain_id=None):
        return super(LabeledToken, cls).__new__(cls, text, lemma, pos,
                                                chunk_idx, mention_idx,
                                                chunk_type, chain_id)


class Chunk(Annotation):
    """
    A flat, typed, contiguous range of tokens (NP, VP, PP...)
    """
    def __init__(self, doc_id, cap_idx, idx, chunk_type, span, tokens):
        super(Chunk, self).__init__(doc_id, idx)
        self.cap_idx = cap_idx
        self.chunk_type = chunk_type
        self.span = span
        self.tokens = tuple(tokens)

    def unique_id(self):
        return '%s#%s;chunk:%d' % (self.doc_id, self.cap_idx, self.idx)

    def token_range(self):
        "inclusive `(first, last)` token offsets"
        return (self.span.first(), self.span.last())

    def text(self):
        "the chunk's tokens, separated by spaces"
        return ' '.join(t.text for t in self.tokens)


def _bio_label(chunk_type, chunk_idx, prev_chunk_idx):
    if not chunk_type:
        return 'O'
    prefix = 'I-' if chunk_idx == prev_chunk_idx else 'B-'
    return prefix + chunk_type


def _runs(labels):
    """
    Maximal runs of identical, non-None labels as
    `(start, end, label)` triples (end exclusive)
    """
    res = []
    start = None
    for i, label in enumerate(labels + [None]):
        if start is not None and (label is None or label != labels[start]):
            res.append((start, i, labels[start]))
            start = None
        if start is None and label is not None:
            start = i
    return res


class Caption(Annotation):
    """
    One sentence, with its tokens, chunks, mentions and dependency
    tree (`root`, which is None if we have no parse, or one we could
    not use).

    The token, chunk and mention lists are kept in ascending index
    order; `validate` checks that indices match list positions.
    `chunk_index` and `mention_index` map token offsets to the index
    of the chunk (resp. mention) covering them
    """
    def __init__(self, doc_id, idx):
        super(Caption, self).__init__(doc_id, idx)
        self.tokens = []
        self.chunks = []
        self.mentions = []
        self.root = None
        self.chunk_index = {}
        self.mention_index = {}

    def unique_id(self):
        return '%s#%s' % (self.doc_id, self.idx)

    def text(self):
        "the caption's tokens, separated by spaces"
        return ' '.join(t.text for t in self.tokens)

    # ------------------------------------------------------------
    # construction
    # ------------------------------------------------------------

    def add_token(self, text, lemma=None, pos=None, idx=None):
        """
        Add a token to the caption (by default, at the end) and
        return it
        """
        if idx is None:
            idx = len(self.tokens)
        tok = Token(self.doc_id, self.idx, idx, text, lemma, pos)
        insert_annotation(self.tokens, tok)
        return tok

    def _check_range(self, start, end, index, kind):
        if start >= end:
            oops = 'Empty %s range [%d, %d) in %s' %\
                (kind, start, end, self.unique_id())
            raise StructuralInvariantViolation(oops)
        if start < 0 or end > len(self.tokens):
            oops = '%s range [%d, %d) out of bounds in %s (%d tokens)' %\
                (kind.capitalize(), start, end, self.unique_id(),
                 len(self.tokens))
            raise StructuralInvariantViolation(oops)
        taken = [i for i in range(start, end) if i in index]
        if taken:
            oops = '%s range [%d, %d) overlaps %s %d in %s' %\
                (kind.capitalize(), start, end, kind, index[taken[0]],
                 self.unique_id())
            raise StructuralInvariantViolation(oops)

    def _check_nesting(self, chunk_span, mention_span):
        "mentions must hold whole chunks"
        if chunk_span.overlaps(mention_span) and\
                not mention_span.encloses(chunk_span):
            oops = 'Mention range %s cuts through chunk range %s in %s' %\
                (mention_span, chunk_span, self.unique_id())
            raise StructuralInvariantViolation(oops)

    def add_chunk(self, start, end, chunk_type, idx=None):
        """
        Add a chunk over tokens `start` to `end` (exclusive), by
        default numbered after the last chunk, and return it

        Raises
        ------
        StructuralInvariantViolation
            If the range is empty, out of bounds, or overlaps an
            existing chunk, or if it sticks out of a mention, or if
            the index is already used
        """
        self._check_range(start, end, self.chunk_index, 'chunk')
        for mention in self.mentions:
            self._check_nesting(Span(start, end), mention.span)
        if idx is None:
            idx = len(self.chunks)
        chunk = Chunk(self.doc_id, self.idx, idx, chunk_type,
                      Span(start, end), self.tokens[start:end])
        insert_annotation(self.chunks, chunk)
        for i in range(start, end):
            self.chunk_index[i] = idx
        for mention in self.mentions:
            if mention.span.encloses(chunk.span):
                mention.chunks = tuple(c for c in self.chunks
                                       if c.span.overlaps(mention.span))
        return chunk

    def add_mention(self, chain_id, start, end,
                    lexical_type=None, cardinality=None,
                    idx=None, resources=None):
        """
        Add a mention over tokens `start` to `end` (exclusive), by
        default numbered after the last mention, and return it.
        The mention's chunks are those overlapping its range.

        The lexical type and cardinality are worked out from the
        linguistic resources unless you supply them.

        Raises
        ------
        StructuralInvariantViolation
            If the range is empty, out of bounds, overlaps an existing
            mention or only part of a chunk, or if the index is
            already used
        ConfigurationError
            If we need linguistic resources and have none
        """
        self._check_range(start, end, self.mention_index, 'mention')
        for chunk in self.chunks:
            self._check_nesting(chunk.span, Span(start, end))
        if resources is None and (lexical_type is None or
                                  cardinality is None):
            raise ConfigurationError('Need linguistic resources to infer '
                                     'the lexical type/cardinality of a '
                                     'mention in %s' % self.unique_id())
        if idx is None:
            idx = len(self.mentions)
        span = Span(start, end)
        tokens = self.tokens[start:end]
        chunks = [c for c in self.chunks if c.span.overlaps(span)]
        if lexical_type is None:
            lexical_type = lexical_type_of(tokens, resources)
        if cardinality is None:
            cardinality = infer_cardinality(tokens, resources)
        mention = Mention(self.doc_id, self.idx, idx, chain_id, span,
                          tokens, chunks, lexical_type, cardinality)
        insert_annotation(self.mentions, mention)
        for i in range(start, end):
            self.mention_index[i] = idx
        return mention

    @classmethod
    def from_labeled_tokens(cls, doc_id, idx, labeled_tokens, resources):
        """
        Build a caption from tokens labelled by an external tagger.

        Chunks and mentions are the maximal runs of tokens sharing a
        chunk (resp. mention) index, numbered in order of appearance.
        Missing lemmas are filled in with the resources' lemmatizer

        :type labeled_tokens: iterable of `LabeledToken`
        """
        labeled_tokens = list(labeled_tokens)
        cap = cls(doc_id, idx)
        for ltok in labeled_tokens:
            lemma = ltok.lemma
            if lemma is None:
                lemma = resources.lemmatize(ltok.text, ltok.pos)
            cap.add_token(ltok.text, lemma=lemma, pos=ltok.pos)
        chunk_ids = [t.chunk_idx for t in labeled_tokens]
        for start, end, _ in _runs(chunk_ids):
            cap.add_chunk(start, end, labeled_tokens[start].chunk_type)
        mention_ids = [t.mention_idx for t in labeled_tokens]
        for start, end, _ in _runs(mention_ids):
            cap.add_mention(labeled_tokens[start].chain_id, start, end,
                            resources=resources)
        return cap

    def set_dependencies(self, edges):
        """
        Build the dependency tree for this caption from `(gov, rel,
        dep)` triples or `gov|rel|dep` strings, and return its root
        (None if the parse is not usable)
        """
        self.root = build_dependency_tree(self.tokens, edges)
        return self.root

    def validate(self):
        """
        Check the structural invariants of this caption: ordered
        lists whose indices match list positions, chunk and mention
        ranges in bounds and non-overlapping, chunks numbered by
        position, mention chunk lists matching the chunks they
        overlap, and index maps that agree with all of these

        Raises
        ------
        StructuralInvariantViolation
        """
        def fail(msg):
            "complain about this caption"
            raise StructuralInvariantViolation('%s: %s' %
                                               (self.unique_id(), msg))

        for name, items in [('token', self.tokens),
                            ('chunk', self.chunks),
                            ('mention', self.mentions)]:
            if not is_strictly_ordered(items):
                fail('%s indices do not match list positions: %s' %
                     (name, [x.idx for x in items]))
        for kind, items, index in [('chunk', self.chunks, self.chunk_index),
                                   ('mention', self.mentions,
                                    self.mention_index)]:
            prev_end = 0
            for item in items:
                span = item.span
                if span.length() <= 0 or span.end > len(self.tokens):
                    fail('bad %s range %s' % (kind, span))
                if span.start < prev_end:
                    fail('%s %d is out of order or overlaps its '
                         'predecessor' % (kind, item.idx))
                prev_end = span.end
                covered = [index.get(i) for i in range(span.start, span.end)]
                if covered != [item.idx] * span.length():
                    fail('index map disagrees with %s %d' % (kind, item.idx))
            if len(index) != sum(x.span.length() for x in items):
                fail('stray entries in the %s index map' % kind)
        for mention in self.mentions:
            expected = [c.idx for c in self.chunks
                        if c.span.overlaps(mention.span)]
            if [c.idx for c in mention.chunks] != expected:
                fail('mention %d does not have the chunks it overlaps' %
                     mention.idx)
            if not all(mention.span.encloses(c.span) for c in mention.chunks):
                fail('mention %d holds only part of a chunk' % mention.idx)

    # ------------------------------------------------------------
    # token membership
    # ------------------------------------------------------------

    def chunk_of(self, token):
        "the chunk this token belongs to, or None"
        cidx = self.chunk_index.get(token.idx)
        if cidx is None:
            return None
        return self.chunks[find_index(self.chunks, cidx)]

    def mention_of(self, token):
        "the mention this token belongs to, or None"
        midx = self.mention_index.get(token.idx)
        if midx is None:
            return None
        return self.mentions[find_index(self.mentions, midx)]

    def chunk_type_of(self, token):
        "the type of this token's chunk, or None"
        chunk = self.chunk_of(token)
        return None if chunk is None else chunk.chunk_type

    def chain_id_of(self, token):
        "the chain id of this token's mention, or None"
        mention = self.mention_of(token)
        return None if mention is None else mention.chain_id

    # ------------------------------------------------------------
    # neighbourhood
    # ------------------------------------------------------------

    def left_neighbor(self, chunk):
        "the chunk just before this one, or None"
        if chunk.idx > 0:
            return self.chunks[chunk.idx - 1]
        return None

    def right_neighbor(self, chunk):
        "the chunk just after this one, or None"
        if chunk.idx < len(self.chunks) - 1:
            return self.chunks[chunk.idx + 1]
        return None

    def interstitial_chunks(self, left, right):
        """
        Chunks strictly between two chunks or mentions (empty if
        they are adjacent, or if a mention has no chunks)
        """
        if isinstance(left, Mention):
            if not left.chunks or not right.chunks:
                return []
            left, right = left.chunks[-1], right.chunks[0]
        return self.chunks[left.idx + 1:right.idx]

    def interstitial_tokens(self, left, right):
        """
        Tokens strictly between two chunks or mentions (empty if
        they are adjacent)
        """
        return self.tokens[left.span.end:right.span.start]

    # ------------------------------------------------------------
    # syntax
    # ------------------------------------------------------------

    def _governing_vp(self, mention, relation_part):
        if self.root is None:
            return None
        res = None
        for node in self.root.nodes_for(mention):
            relation = node.relation
            if relation is not None and relation_part in relation:
                chunk = self.chunk_of(node.governor.token)
                if chunk is not None and chunk.chunk_type == 'VP':
                    res = chunk
        return res

    def subject_of(self, mention):
        """
        The VP chunk of which this mention is the subject, or None
        (also if we have no dependency tree)
        """
        return self._governing_vp(mention, 'subj')

    def object_of(self, mention):
        """
        The VP chunk of which this mention is an object, or None
        (also if we have no dependency tree)
        """
        return self._governing_vp(mention, 'obj')

    # ------------------------------------------------------------
    # output
    # ------------------------------------------------------------

    def to_coref_string(self, chain_map=None, include_id=True):
        """
        This caption in the bracketed coreference format
        (see `capanno.coref.to_coref_string`)
        """
        from .coref import to_coref_string
        return to_coref_string(self, chain_map=chain_map,
                               include_id=include_id)

    def to_entities_string(self, chain_map=None):
        """
        This caption in the bracketed entities format
        (see `capanno.entities.to_entities_string`)
        """
        from .entities import to_entities_string
        return to_entities_string(self, chain_map=chain_map)

    def to_chunk_type_string(self, include_chunkless=True):
        """
        The caption as a sequence of chunk types (`NP VP NP`); tokens
        outside any chunk are written out as is unless
        `include_chunkless` is False (`NP and NP VP`)
        """
        words = []
        prev = None
        for tok in self.tokens:
            cidx = self.chunk_index.get(tok.idx)
            if cidx is None:
                if include_chunkless:
                    words.append(tok.text)
            elif cidx != prev:
                words.append(self.chunk_type_of(tok))
            prev = cidx
        return ' '.join(words)

    def to_pos_string(self):
        "`(DT A) (NN person) ...`"
        return ' '.join(t.pos_string() for t in self.tokens)

    def to_conll_strings(self, predicted=None):
        """
        CoNLL-2000 chunking lines, one per token: word, POS tag, gold
        BIO chunk label and, if given a caption with predicted chunks
        over the same tokens, the predicted label ::

            dogs NNS I-NP B-NP
        """
        res = []
        prev_gold = None
        prev_pred = None
        for i, tok in enumerate(self.tokens):
            gold_idx = self.chunk_index.get(tok.idx)
            fields = [tok.text, tok.pos or '',
                      _bio_label(self.chunk_type_of(tok), gold_idx,
                                 prev_gold)]
            prev_gold = gold_idx
            if predicted is not None:
                ptok = predicted.tokens[i]
                pred_idx = predicted.chunk_index.get(ptok.idx)
                fields.append(_bio_label(predicted.chunk_type_of(ptok),
                                         pred_idx, prev_pred))
                prev_pred = pred_idx
            res.append(' '.join(fields))
        return res
