#!/usr/bin/env python
# -*- coding: utf-8 -*-

# License: BSD3

"""
The bracketed coreference format.

One caption per line: an optional `docID#capIdx` and tab, then a
space separated stream of `text/POS` tokens, grouped into chunks by
`[Type ... ]` brackets, chunks in turn grouped into mentions by
`[EN/chainID ... ]` brackets ::

    1000092795.jpg#0<TAB>[EN/5 [NP Two/CD dogs/NNS ] ] [VP run/VBP ]

Entity brackets always sit outside chunk brackets. Older versions of
the corpus sometimes bracketed a `[PP of/IN ]` inside a noun phrase
chunk; we read these by ignoring the inner bracket, and never write
them out.

Reading is done by `CorefParser`, a little state machine with one
method per kind of unit (`open_entity`, `open_chunk`, `close`,
`token`, `end`).
"""

from enum import Enum

from .caption import Caption
from .mention import NONVISUAL_CHAIN


class FormatError(Exception):
    """
    Malformed input in one of the bracketed caption formats. We
    report the caption we were reading, and the tokens read so far
    """
    def __init__(self, msg, doc_id=None, cap_idx=None, tokens=None):
        self.doc_id = doc_id
        self.cap_idx = cap_idx
        self.tokens = list(tokens or [])
        where = '%s#%s' % (doc_id, cap_idx)
        so_far = ' '.join(t.text for t in self.tokens)
        super(FormatError, self).__init__('%s (%s)\nTokens thus far:\n%s' %
                                          (msg, where, so_far))


class ParserState(Enum):
    """
    Where we are in the bracket structure
    """
    IDLE = 'idle'
    IN_CHUNK = 'in chunk'
    IN_ENTITY = 'in entity'
    IN_CHUNK_IN_ENTITY = 'in chunk in entity'
    SUPPRESSED_CLOSE = 'suppressed close'


_LEGACY_CHUNK = 'PP'


class CorefParser(object):
    """
    State machine building a caption out of a stream of units.

    Feed it units with the transition methods, then call `end` to
    get the caption. Each transition raises `FormatError` if the unit
    is not allowed in the current state.
    """
    def __init__(self, resources, doc_id=None, idx=None):
        self.resources = resources
        self.caption = Caption(doc_id, idx)
        self.state = ParserState.IDLE
        self._chunk_start = None
        self._chunk_type = None
        self._entity_start = None
        self._chain_id = None
        self._resume_state = None

    def _fail(self, msg):
        raise FormatError(msg, self.caption.doc_id, self.caption.idx,
                          self.caption.tokens)

    def open_entity(self, chain_id):
        "`[EN/chainID`"
        if self.state != ParserState.IDLE:
            self._fail('Unexpected new entity bracket')
        if not chain_id:
            self._fail('Entity bracket without a chain id')
        self._entity_start = len(self.caption.tokens)
        self._chain_id = chain_id
        self.state = ParserState.IN_ENTITY

    def open_chunk(self, chunk_type):
        "`[Type`"
        if self.state in (ParserState.IN_CHUNK,
                          ParserState.IN_CHUNK_IN_ENTITY) and\
           chunk_type == _LEGACY_CHUNK:
            self._resume_state = self.state
            self.state = ParserState.SUPPRESSED_CLOSE
            return
        if self.state == ParserState.IDLE:
            self.state = ParserState.IN_CHUNK
        elif self.state == ParserState.IN_ENTITY:
            self.state = ParserState.IN_CHUNK_IN_ENTITY
        else:
            self._fail('Unexpected new chunk bracket [%s' % chunk_type)
        self._chunk_start = len(self.caption.tokens)
        self._chunk_type = chunk_type

    def close(self):
        "`]`"
        end = len(self.caption.tokens)
        if self.state == ParserState.SUPPRESSED_CLOSE:
            self.state = self._resume_state
            self._resume_state = None
        elif self.state in (ParserState.IN_CHUNK,
                            ParserState.IN_CHUNK_IN_ENTITY):
            if end == self._chunk_start:
                self._fail('Empty chunk [%s' % self._chunk_type)
            self.caption.add_chunk(self._chunk_start, end, self._chunk_type)
            self.state = ParserState.IDLE\
                if self.state == ParserState.IN_CHUNK\
                else ParserState.IN_ENTITY
        elif self.state == ParserState.IN_ENTITY:
            if end == self._entity_start:
                self._fail('Empty entity [EN/%s' % self._chain_id)
            self.caption.add_mention(self._chain_id, self._entity_start, end,
                                     resources=self.resources)
            self.state = ParserState.IDLE
        else:
            self._fail('Found unopened closing bracket')

    def token(self, text, pos):
        "`text/POS`"
        lemma = self.resources.lemmatize(text, pos)
        self.caption.add_token(text, lemma=lemma, pos=pos)

    def end(self):
        """
        Finish reading and return the caption
        """
        if self.state != ParserState.IDLE:
            self._fail('Unterminated bracket at end of caption (%s)' %
                       self.state.value)
        return self.caption

    def feed(self, unit):
        """
        Dispatch a single whitespace delimited unit to the appropriate
        transition
        """
        if unit == '[EN' or unit.startswith('[EN/'):
            self.open_entity(unit[4:])
        elif unit.startswith('[') and len(unit) > 1:
            self.open_chunk(unit[1:])
        elif unit == ']':
            self.close()
        elif unit == '/':
            self.token('/', None)
        else:
            text, sep, pos = unit.rpartition('/')
            if not sep or not text or not pos:
                self._fail('Found token without POS: %s' % unit)
            self.token(text, pos)


def read_caption_id(prefix):
    """
    `(doc_id, cap_idx)` from a `docID#capIdx` string
    """
    doc_id, sep, cap_idx = prefix.strip().rpartition('#')
    if not sep or not doc_id or not cap_idx.isdigit():
        raise FormatError('Bad caption id %r' % prefix)
    return doc_id, int(cap_idx)


def parse_coref_string(line, resources, doc_id=None, idx=None):
    """
    Read a caption in the coreference format.

    The document id and caption index are taken from the `docID#capIdx`
    prefix if there is one, otherwise from the arguments

    :type resources: `LinguisticResources`
    :rtype: `Caption`
    """
    line = line.strip('\r\n')
    if '\t' in line:
        prefix, _, line = line.partition('\t')
        doc_id, idx = read_caption_id(prefix)
    parser = CorefParser(resources, doc_id=doc_id, idx=idx)
    for unit in line.split():
        parser.feed(unit)
    return parser.end()


def _chain_label(mention, chain_map):
    if chain_map is None:
        chain_id = mention.chain_id
    else:
        chain_id = chain_map.get(mention.span.start)
    return NONVISUAL_CHAIN if chain_id is None else chain_id


def _token_unit(tok):
    if tok.pos is None:
        return tok.text
    return '%s/%s' % (tok.text, tok.pos)


def to_coref_string(caption, chain_map=None, include_id=True):
    """
    Write a caption in the coreference format.

    :param chain_map: if given, token offset to chain id, used in place
                      of the mentions' own chain ids (looked up at the
                      first token of each mention; missing entries are
                      written as "0")
    :param include_id: prefix the caption with `docID#capIdx` and a tab
    """
    units = []
    prev_chunk = None
    prev_mention = None
    for tok in caption.tokens:
        chunk = caption.chunk_index.get(tok.idx)
        mention = caption.mention_index.get(tok.idx)
        if chunk != prev_chunk and prev_chunk is not None:
            units.append(']')
        if mention != prev_mention and prev_mention is not None:
            units.append(']')
        if mention != prev_mention and mention is not None:
            label = _chain_label(caption.mention_of(tok), chain_map)
            units.append('[EN/%s' % label)
        if chunk != prev_chunk and chunk is not None:
            units.append('[%s' % caption.chunk_type_of(tok))
        units.append(_token_unit(tok))
        prev_chunk = chunk
        prev_mention = mention
    if prev_chunk is not None:
        units.append(']')
    if prev_mention is not None:
        units.append(']')
    body = ' '.join(units)
    if include_id:
        return '%s\t%s' % (caption.unique_id(), body)
    return body
