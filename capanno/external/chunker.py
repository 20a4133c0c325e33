#!/usr/bin/env python
# -*- coding: utf-8 -*-

# License: BSD3

"""
Chunker output (CoNLL-2000 style BIO tags) into labelled tokens, which
`capanno.caption.Caption.from_labeled_tokens` can then turn into a
caption.

The file format is one token per line, `word POS chunk`, with a blank
line between sentences ::

    Two  CD  B-NP
    dogs NNS I-NP
    run  VBP B-VP
"""

import codecs

from ..caption import LabeledToken


class ChunkTagError(Exception):
    """
    Chunker output we do not know what to do with
    """
    def __init__(self, *args, **kw):
        super(ChunkTagError, self).__init__(*args, **kw)


def read_bio_tag(tag):
    """
    `(prefix, chunk_type)` for a BIO tag, eg. `('B', 'NP')`;
    `('O', None)` for tokens outside any chunk
    """
    if tag == 'O':
        return 'O', None
    prefix, sep, chunk_type = tag.partition('-')
    if not sep or prefix not in ('B', 'I') or not chunk_type:
        raise ChunkTagError("Not a BIO chunk tag: %s" % tag)
    return prefix, chunk_type


def labeled_tokens_from_bio(words, pos_tags, chunk_tags,
                            mention_ids=None, chain_ids=None,
                            lemmatize=None):
    """
    Labelled tokens for a sentence from parallel lists of words, part
    of speech tags and BIO chunk tags.

    A chunk starts at every `B-` tag, and at any `I-` tag that does not
    continue a chunk of the same type (as some chunkers are wont to
    emit). Chunks are numbered from 0 in order.

    :param mention_ids: per token mention index (or None), if any
    :param chain_ids: per token chain id (or None), if any
    :param lemmatize: if given, `(text, pos) -> lemma`, used to fill
                      in the lemmas; otherwise lemmas are left as None
    :rtype: list of `LabeledToken`
    """
    size = len(words)
    mention_ids = mention_ids or [None] * size
    chain_ids = chain_ids or [None] * size
    if any(len(x) != size for x in
           [pos_tags, chunk_tags, mention_ids, chain_ids]):
        raise ChunkTagError("Mismatched lengths for words, tags and "
                            "labels of sentence: %s" % ' '.join(words))
    res = []
    chunk_idx = -1
    prev_type = None
    for i, word in enumerate(words):
        prefix, chunk_type = read_bio_tag(chunk_tags[i])
        if chunk_type is None:
            this_chunk = None
        elif prefix == 'B' or chunk_type != prev_type:
            chunk_idx += 1
            this_chunk = chunk_idx
        else:
            this_chunk = chunk_idx
        prev_type = chunk_type
        lemma = lemmatize(word, pos_tags[i]) if lemmatize else None
        res.append(LabeledToken(word,
                                lemma=lemma,
                                pos=pos_tags[i],
                                chunk_idx=this_chunk,
                                mention_idx=mention_ids[i],
                                chunk_type=chunk_type,
                                chain_id=chain_ids[i]))
    return res


def read_chunk_file(fname, lemmatize=None):
    """
    Return a list of lists of `LabeledToken`, one per sentence in a
    CoNLL-2000 style chunker output file
    """
    sentences = []
    rows = []

    def flush():
        "finish the current sentence"
        if rows:
            words, tags, chunks = zip(*rows)
            sentences.append(labeled_tokens_from_bio(list(words),
                                                     list(tags),
                                                     list(chunks),
                                                     lemmatize=lemmatize))
            del rows[:]

    with codecs.open(fname, 'r', 'utf-8') as stream:
        for line in stream:
            spl = line.split()
            if len(spl) == 3:
                rows.append(spl)
            elif len(spl) == 0:
                flush()
            else:
                raise ChunkTagError("Did not understand this "
                                    "line in chunk file: " + line)
    flush()
    return sentences
