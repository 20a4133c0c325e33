# -*- coding: utf-8 -*-
#
# License: BSD3
# pylint: disable=invalid-name

"""
Tests for capanno.lexicon
"""

import os
import shutil
import tempfile
import unittest

from capanno.lexicon import (ConfigurationError, DEFAULT_WORDLIST_DIR,
                             LinguisticResources,
                             PronounEntry, PronounType)
from capanno.lexicon.wordlist import (WordListError, read_counted_list,
                                      read_lexicon, read_word_list)


class WordListTest(unittest.TestCase):
    "word list formats"

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _write(self, name, lines):
        path = os.path.join(self.tmpdir, name)
        with open(path, 'w') as stream:
            stream.write('\n'.join(lines) + '\n')
        return path

    def test_plain(self):
        "comments and blanks are skipped, entries lowercased"
        path = self._write('plain.txt', ['# a comment', '', 'Scissors',
                                         '  sunglasses  '])
        self.assertEqual(frozenset(['scissors', 'sunglasses']),
                         read_word_list(path))

    def test_counted(self):
        "optional counts"
        path = self._write('counted.txt', ['dozen:12', 'group:', 'Pair:2'])
        self.assertEqual({'dozen': 12, 'group': None, 'pair': 2},
                         dict(read_counted_list(path)))
        bad = self._write('bad.txt', ['dozen:twelve'])
        self.assertRaises(WordListError, read_counted_list, bad)
        self.assertRaises(WordListError, read_counted_list, path,
                          required=True)

    def test_pronoun_entry(self):
        "pronoun table entries"
        entry = PronounEntry.read_entry('They:subjective:plural:person')
        self.assertEqual('they', entry.word)
        self.assertEqual(PronounType.SUBJECTIVE, entry.ptype)
        self.assertTrue(entry.plural)
        self.assertTrue(entry.person)
        entry = PronounEntry.read_entry('each other:reciprocal:plural:')
        self.assertFalse(entry.person)
        for line in ['he:subjective:singular',
                     'he:possessive:singular:person',
                     'he:subjective:dual:person']:
            self.assertRaises(WordListError, PronounEntry.read_entry, line)

    def test_lexicon(self):
        "lemmas in more than one lexicon"
        animals = self._write('animals.txt', ['dog', 'horse'])
        people = self._write('people.txt', ['man', 'dog'])
        lexicon = read_lexicon({'animals': animals, 'people': people})
        self.assertEqual('animals/people', lexicon['dog'])
        self.assertEqual('people', lexicon['man'])

    def test_missing_lists(self):
        "we would rather not run without our word lists"
        self.assertRaises(ConfigurationError, LinguisticResources.load,
                          wordlist_dir=self.tmpdir)

    def test_malformed_lists(self):
        "bad entries are reported at load time"
        wordlist_dir = os.path.join(self.tmpdir, 'lists')
        shutil.copytree(DEFAULT_WORDLIST_DIR, wordlist_dir)
        self._write('lists/pronouns.txt', ['he:subjective'])
        self.assertRaises(ConfigurationError, LinguisticResources.load,
                          wordlist_dir=wordlist_dir)
        shutil.copy(os.path.join(DEFAULT_WORDLIST_DIR, 'pronouns.txt'),
                    wordlist_dir)
        self._write('lists/quantifiers.txt', ['several:3', 'plenty'])
        self.assertRaises(ConfigurationError, LinguisticResources.load,
                          wordlist_dir=wordlist_dir)


class ResourcesTest(unittest.TestCase):
    "the default resources"

    def setUp(self):
        self.res = LinguisticResources.load(lemmatizer=lambda t, p: t.lower())

    def test_lists(self):
        "a few things we rely on"
        self.assertEqual(2, self.res.numerals['two'])
        self.assertEqual(3, self.res.quantifiers['several'])
        self.assertTrue(self.res.is_article('The'))
        self.assertEqual(12, self.res.collective_count('Dozen'))
        self.assertEqual(None, self.res.collective_count('team'))
        self.assertTrue(self.res.is_collective('team'))
        self.assertFalse(self.res.is_collective('dog'))
        self.assertTrue('scissors' in self.res.singular_artifacts)
        self.assertTrue('water' in self.res.mass)
        self.assertTrue('time' in self.res.nonvisual)
        self.assertEqual('people', self.res.lexicon['baseball player'])

    def test_pronouns(self):
        "pronoun lookup"
        self.assertTrue(self.res.pronoun('They').plural)
        self.assertEqual(PronounType.RECIPROCAL,
                         self.res.pronoun('each other').ptype)
        self.assertEqual(None, self.res.pronoun('dog'))
        self.assertEqual(None, self.res.pronoun(None))
        people = sorted(k for k, v in self.res.pronouns.items() if v.person)
        self.assertEqual(['he', 'her', 'herself', 'him', 'himself', 'she',
                          'somebody', 'someone', 'them', 'themselves',
                          'they', 'who', 'whom'], people)

    def test_lemmatizer(self):
        "lemmatizers can be swapped"
        self.assertEqual('dogs', self.res.lemmatize('Dogs', 'NNS'))
        bare = self.res.with_lemmatizer(None)
        self.assertRaises(ConfigurationError, bare.lemmatize, 'dogs')
        self.assertEqual(self.res.numerals, bare.numerals)
