# -*- coding: utf-8 -*-
#
# License: BSD3
# pylint: disable=too-many-public-methods

"""
Tests for capanno.external
"""

import os
import shutil
import tempfile
import unittest

from capanno.caption import Caption
from capanno.lexicon import ConfigurationError, LinguisticResources
from .chunker import (ChunkTagError, labeled_tokens_from_bio,
                      read_bio_tag, read_chunk_file)
from .lemmatizer import WordNetLemmatizer, wordnet_pos


def _lemmatize(text, pos=None):
    "stand-in for a real lemmatizer"
    word = text.lower()
    return word[:-1] if word.endswith('s') else word


class _EchoLemmatizer(object):
    "what would have been asked of WordNet"
    def lemmatize(self, word, pos):
        return (word, pos)


class _NoDataLemmatizer(object):
    "as though the WordNet data were not installed"
    def lemmatize(self, word, pos):
        raise LookupError('Resource wordnet not found')


class ChunkerTest(unittest.TestCase):
    "chunker output"

    WORDS = ['Two', 'dogs', 'run']
    TAGS = ['CD', 'NNS', 'VBP']

    def test_bio(self):
        "BIO tags into chunk indices"
        ltoks = labeled_tokens_from_bio(self.WORDS, self.TAGS,
                                        ['B-NP', 'I-NP', 'B-VP'])
        self.assertEqual([0, 0, 1], [t.chunk_idx for t in ltoks])
        self.assertEqual(['NP', 'NP', 'VP'], [t.chunk_type for t in ltoks])
        self.assertEqual([None, None, None], [t.lemma for t in ltoks])

    def test_sloppy_bio(self):
        "inside tags that start a chunk, and tokens outside chunks"
        ltoks = labeled_tokens_from_bio(['dogs', 'and', 'cats', 'run'],
                                        ['NNS', 'CC', 'NNS', 'VBP'],
                                        ['I-NP', 'O', 'I-NP', 'I-VP'])
        self.assertEqual([0, None, 1, 2], [t.chunk_idx for t in ltoks])
        self.assertEqual(None, ltoks[1].chunk_type)

    def test_bad_tags(self):
        "things that are not BIO tags"
        self.assertEqual(('O', None), read_bio_tag('O'))
        self.assertEqual(('I', 'PP'), read_bio_tag('I-PP'))
        for tag in ['X-NP', 'B-', 'NP', 'B']:
            self.assertRaises(ChunkTagError, read_bio_tag, tag)
        self.assertRaises(ChunkTagError, labeled_tokens_from_bio,
                          self.WORDS, self.TAGS, ['B-NP', 'I-NP'])

    def test_caption(self):
        "chunker and coreference output into a caption"
        ltoks = labeled_tokens_from_bio(self.WORDS, self.TAGS,
                                        ['B-NP', 'I-NP', 'B-VP'],
                                        mention_ids=[0, 0, None],
                                        chain_ids=['5', '5', None],
                                        lemmatize=_lemmatize)
        self.assertEqual(['two', 'dog', 'run'], [t.lemma for t in ltoks])
        res = LinguisticResources.load(lemmatizer=_lemmatize)
        cap = Caption.from_labeled_tokens('1000092795.jpg', 0, ltoks, res)
        self.assertEqual('[EN/5 [NP Two/CD dogs/NNS ] ] [VP run/VBP ]',
                         cap.to_coref_string(include_id=False))
        self.assertEqual('1|2', str(cap.mentions[0].cardinality))

    def test_read_file(self):
        "CoNLL-2000 style files"
        tmpdir = tempfile.mkdtemp()
        try:
            path = os.path.join(tmpdir, 'chunks.txt')
            with open(path, 'w') as stream:
                stream.write('Two CD B-NP\ndogs NNS I-NP\nrun VBP B-VP\n\n'
                             'Cats NNS B-NP\nsleep VBP B-VP\n')
            sentences = read_chunk_file(path)
            self.assertEqual([3, 2], [len(x) for x in sentences])
            self.assertEqual('VP', sentences[1][1].chunk_type)
            with open(path, 'w') as stream:
                stream.write('Two CD\n')
            self.assertRaises(ChunkTagError, read_chunk_file, path)
        finally:
            shutil.rmtree(tmpdir)


class LemmatizerTest(unittest.TestCase):
    "WordNet lemmatizer adapter"

    def test_tags(self):
        "Penn Treebank tags to WordNet"
        self.assertEqual('a', wordnet_pos('JJ'))
        self.assertEqual('v', wordnet_pos('VBZ'))
        self.assertEqual('r', wordnet_pos('RB'))
        self.assertEqual('n', wordnet_pos('NNS'))
        self.assertEqual('n', wordnet_pos('CD'))
        self.assertEqual('n', wordnet_pos(None))

    def test_call(self):
        "lowercased, with the WordNet tag"
        lemmatize = WordNetLemmatizer(_EchoLemmatizer())
        self.assertEqual(('dogs', 'n'), lemmatize('Dogs', 'NNS'))
        self.assertEqual(('running', 'v'), lemmatize('Running', 'VBG'))
        self.assertEqual(('big', 'n'), lemmatize('big'))

    def test_missing_data(self):
        "missing WordNet data is a configuration problem"
        lemmatize = WordNetLemmatizer(_NoDataLemmatizer())
        self.assertRaises(ConfigurationError, lemmatize, 'dogs', 'NNS')
