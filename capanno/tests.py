# -*- coding: utf-8 -*-
#
# License: BSD3
# pylint: disable=too-many-public-methods, invalid-name

"""
Tests for capanno
"""

import os
import shutil
import tempfile
import unittest
import warnings
import xml.etree.ElementTree as ET

from capanno.annotation import (Annotation, Span,
                                StructuralInvariantViolation,
                                find_index, insert_annotation,
                                is_strictly_ordered)
from capanno.caption import Caption, LabeledToken, Token
from capanno.cardinality import (MASS, Cardinality, approx_equal,
                                 infer_cardinality, read_numeral, unify)
from capanno.coref import FormatError, parse_coref_string
from capanno.corpus import (EntitiesReader, merge_boxes, read_coref_file,
                            read_coref_lines, summary)
from capanno.deptree import (DependencyFormatError,
                             build_dependency_tree,
                             parse_dependency_string)
from capanno.document import (BoundingBox, Document, mention_pair_str,
                              read_mention_pair_str)
from capanno.entities import (AnnotationXmlError, annotation_to_xml,
                              apply_annotation, parse_entities_string,
                              read_annotation, read_annotation_file)
from capanno.lexicon import ConfigurationError, LinguisticResources
from capanno.lexicon.wordlist import PronounType
from capanno.mention import lexical_type_of, lexical_type_match

# ---------------------------------------------------------------------
# fixtures
# ---------------------------------------------------------------------

_LEMMAS = {'dogs': 'dog',
           'teams': 'team',
           'men': 'man',
           'eggs': 'egg',
           'hundreds': 'hundred',
           'horses': 'horse',
           'rides': 'ride',
           'sits': 'sit',
           'chases': 'chase'}


def _lemmatize(text, pos=None):
    "stand-in for a real lemmatizer"
    word = text.lower()
    return _LEMMAS.get(word, word)


RES = LinguisticResources.load(lemmatizer=_lemmatize)


def _tokens(text):
    "tokens from `word/TAG` pairs"
    res = []
    for i, unit in enumerate(text.split()):
        word, _, tag = unit.rpartition('/')
        res.append(Token('t.jpg', 0, i, word, _lemmatize(word), tag))
    return res


def _card(text):
    return infer_cardinality(_tokens(text), RES)


SPEC_LINE = '1000092795.jpg#0\t[EN/5 [NP Two/CD dogs/NNS ] ] [VP run/VBP ]'

CHASE_LINE = '[EN/1 [NP The/DT dog/NN ] ] [VP chases/VBZ ] '\
    '[EN/2 [NP a/DT cat/NN ] ]'

CHASE_EDGES = ['1|det|0', '2|dobj|4', '4|det|3', '2|nsubj|1', '-1|ROOT|2']

DOC_LINES = ['img.jpg#0\t[EN/1 [NP A/DT man/NN ] ] [VP rides/VBZ ] '
             '[EN/2 [NP a/DT horse/NN ] ]',
             'other.jpg#0\t[EN/3 [NP Dogs/NNS ] ] [VP run/VBP ]',
             '',
             'img.jpg#1\t[EN/1 [NP The/DT man/NN ] ] [VP sits/VBZ ] '
             '[PP on/IN ] [EN/2 [NP a/DT brown/JJ horse/NN ] ] '
             '[PP in/IN ] [EN/0 [NP the/DT sun/NN ] ]']

ANNOTATION_XML = """
<annotation>
  <filename>img.jpg</filename>
  <size><width>500</width><height>333</height><depth>3</depth></size>
  <object>
    <name>img.jpg_1</name>
    <bndbox><xmin>10</xmin><ymin>10</ymin><xmax>50</xmax><ymax>90</ymax>
    </bndbox>
  </object>
  <object>
    <name>1</name>
    <name>2</name>
    <bndbox><xmin>40</xmin><ymin>40</ymin><xmax>100</xmax><ymax>100</ymax>
    </bndbox>
  </object>
  <object>
    <name>img.jpg_0</name>
    <scene>1</scene>
    <nobndbox>1</nobndbox>
  </object>
</annotation>
"""


def _read_docs():
    return read_coref_lines(DOC_LINES, RES)


# ---------------------------------------------------------------------
# annotations
# ---------------------------------------------------------------------


class _Item(Annotation):
    "bare annotation"
    def unique_id(self):
        return 'item:%d' % self.idx


class AnnotationTest(unittest.TestCase):
    "ordered annotation lists"

    def test_out_of_order_insertion(self):
        "items land in index order whatever order we add them in"
        items = []
        for idx in [2, 0, 3, 1]:
            insert_annotation(items, _Item('d', idx))
        self.assertEqual([0, 1, 2, 3], [x.idx for x in items])
        self.assertTrue(is_strictly_ordered(items))
        self.assertEqual(2, find_index(items, 2))
        self.assertEqual(None, find_index(items, 7))

    def test_duplicate(self):
        "indices are unique"
        items = [_Item('d', 0)]
        self.assertRaises(StructuralInvariantViolation,
                          insert_annotation, items, _Item('d', 0))
        self.assertEqual(1, len(items))

    def test_gaps(self):
        "ordered but not contiguous"
        items = []
        insert_annotation(items, _Item('d', 0))
        insert_annotation(items, _Item('d', 2))
        self.assertFalse(is_strictly_ordered(items))

    def test_span(self):
        "token spans"
        span = Span(0, 3)
        self.assertEqual(Span(2, 3), span.overlaps(Span(2, 5)))
        self.assertEqual(None, span.overlaps(Span(3, 5)))
        self.assertEqual(2, span.last())
        self.assertEqual(Span(1, 3), Span.inclusive(1, 2))
        self.assertTrue(span.encloses(Span(1, 2)))
        self.assertFalse(Span(1, 2).encloses(span))
        self.assertEqual(Span(0, 5), span.merge(Span(4, 5)))

# ---------------------------------------------------------------------
# coreference format
# ---------------------------------------------------------------------


class CorefFormatTest(unittest.TestCase):
    "the bracketed coreference format"

    def test_read(self):
        "one mention over one chunk, and a chunk on its own"
        cap = parse_coref_string(SPEC_LINE, RES)
        self.assertEqual('1000092795.jpg', cap.doc_id)
        self.assertEqual(0, cap.idx)
        self.assertEqual(['Two', 'dogs', 'run'],
                         [t.text for t in cap.tokens])
        self.assertEqual([('NP', Span(0, 2)), ('VP', Span(2, 3))],
                         [(c.chunk_type, c.span) for c in cap.chunks])
        self.assertEqual(1, len(cap.mentions))
        mention = cap.mentions[0]
        self.assertEqual('5', mention.chain_id)
        self.assertEqual('Two dogs', mention.text())
        self.assertEqual([0], [c.idx for c in mention.chunks])
        self.assertEqual('animals', mention.lexical_type)
        self.assertEqual('1|2', str(mention.cardinality))
        self.assertEqual('dog', cap.tokens[1].lemma)
        cap.validate()

    def test_round_trip(self):
        "write out what we read in"
        cap = parse_coref_string(SPEC_LINE, RES)
        self.assertEqual(SPEC_LINE, cap.to_coref_string())
        cap2 = parse_coref_string(CHASE_LINE, RES, doc_id='x.jpg', idx=4)
        self.assertEqual('x.jpg', cap2.doc_id)
        self.assertEqual(CHASE_LINE, cap2.to_coref_string(include_id=False))

    def test_derivation_idempotent(self):
        "reading our own output gives the same structure"
        cap = parse_coref_string(SPEC_LINE, RES)
        cap2 = parse_coref_string(cap.to_coref_string(), RES)
        self.assertEqual(cap.chunk_index, cap2.chunk_index)
        self.assertEqual(cap.mention_index, cap2.mention_index)
        self.assertEqual(cap.to_coref_string(), cap2.to_coref_string())

    def test_legacy_pp(self):
        "PP brackets inside a chunk are read but not written"
        line = '[EN/3 [NP the/DT top/NN [PP of/IN ] the/DT hill/NN ] ]'
        cap = parse_coref_string(line, RES, doc_id='x.jpg', idx=0)
        self.assertEqual(5, len(cap.tokens))
        self.assertEqual(1, len(cap.chunks))
        self.assertEqual(Span(0, 5), cap.chunks[0].span)
        self.assertEqual(Span(0, 5), cap.mentions[0].span)
        self.assertEqual('[EN/3 [NP the/DT top/NN of/IN the/DT hill/NN ] ]',
                         cap.to_coref_string(include_id=False))

    def test_slash_token(self):
        "a bare slash is a token without a tag"
        cap = parse_coref_string('[NP dogs/NNS / cats/NNS ]', RES,
                                 doc_id='x.jpg', idx=0)
        self.assertEqual(['dogs', '/', 'cats'], [t.text for t in cap.tokens])
        self.assertEqual(None, cap.tokens[1].pos)

    def assertBadCoref(self, line):
        "reading the line should fail"
        self.assertRaises(FormatError, parse_coref_string, line, RES,
                          'x.jpg', 0)

    def test_errors(self):
        "malformed bracketing"
        self.assertBadCoref('[NP dogs ]')
        self.assertBadCoref('] dogs/NNS')
        self.assertBadCoref('[EN/1 [NP dogs/NNS ]')
        self.assertBadCoref('[EN/1 ]')
        self.assertBadCoref('[NP ]')
        self.assertBadCoref('[NP [VP run/VBP ] ]')
        self.assertBadCoref('[EN/1 [EN/2 [NP dogs/NNS ] ] ]')
        self.assertBadCoref('[EN [NP dogs/NNS ] ]')

    def test_error_context(self):
        "errors say where they happened"
        try:
            parse_coref_string('x.jpg#3\t[NP two/CD dogs ]', RES)
        except FormatError as oops:
            self.assertEqual('x.jpg', oops.doc_id)
            self.assertEqual(3, oops.cap_idx)
            self.assertEqual(['two'], [t.text for t in oops.tokens])
            self.assertTrue('two' in str(oops))
        else:
            self.fail('expected a FormatError')

# ---------------------------------------------------------------------
# entities format
# ---------------------------------------------------------------------


class EntitiesFormatTest(unittest.TestCase):
    "the bracketed entities format"

    LINE = '[/EN#5/animals Two dogs] run in [/EN#7/scene the park]'

    def test_read(self):
        "mentions without chunks"
        cap = parse_entities_string(self.LINE, 'x.jpg', 2, RES)
        self.assertEqual(6, len(cap.tokens))
        self.assertEqual([], cap.chunks)
        self.assertEqual([('5', Span(0, 2), 'animals'),
                          ('7', Span(4, 6), 'scene')],
                         [(m.chain_id, m.span, m.lexical_type)
                          for m in cap.mentions])
        self.assertEqual('1|2', str(cap.mentions[0].cardinality))
        self.assertEqual(None, cap.tokens[0].pos)
        cap.validate()

    def test_round_trip(self):
        "write out what we read in"
        cap = parse_entities_string(self.LINE, 'x.jpg', 2, RES)
        self.assertEqual(self.LINE, cap.to_entities_string())

    def test_inferred_type(self):
        "lexical types are looked up if missing"
        cap = parse_entities_string('[/EN#5 dogs] run', 'x.jpg', 0, RES)
        self.assertEqual('animals', cap.mentions[0].lexical_type)
        self.assertEqual('1|1+', str(cap.mentions[0].cardinality))

    def test_chain_map(self):
        "relabelled chains"
        cap = parse_entities_string(self.LINE, 'x.jpg', 2, RES)
        self.assertEqual('[/EN#9/animals Two dogs] run in '
                         '[/EN#0/scene the park]',
                         cap.to_entities_string(chain_map={0: '9'}))

    def test_errors(self):
        "malformed bracketing"
        for line in ['[/EN#1/people a [/EN#2/people man]]',
                     'a man]',
                     '[/EN#1/people a man',
                     '[/EN#1/people ] man',
                     '[/XX#1/people a man]']:
            self.assertRaises(FormatError,
                              parse_entities_string, line, 'x.jpg', 0, RES)

# ---------------------------------------------------------------------
# captions
# ---------------------------------------------------------------------


class CaptionTest(unittest.TestCase):
    "building and querying captions"

    def setUp(self):
        self.cap = parse_coref_string(CHASE_LINE, RES,
                                      doc_id='x.jpg', idx=0)
        self.dog, self.cat = self.cap.mentions

    def test_membership(self):
        "which chunk/mention a token is in"
        toks = self.cap.tokens
        self.assertEqual('NP', self.cap.chunk_type_of(toks[1]))
        self.assertEqual('VP', self.cap.chunk_type_of(toks[2]))
        self.assertEqual('1', self.cap.chain_id_of(toks[0]))
        self.assertEqual(None, self.cap.mention_of(toks[2]))
        self.assertEqual('2', self.cap.chain_id_of(toks[4]))

    def test_neighbours(self):
        "chunks and tokens in between"
        chunks = self.cap.chunks
        self.assertEqual(None, self.cap.left_neighbor(chunks[0]))
        self.assertEqual(chunks[1], self.cap.right_neighbor(chunks[0]))
        self.assertEqual(None, self.cap.right_neighbor(chunks[2]))
        self.assertEqual([chunks[1]],
                         self.cap.interstitial_chunks(self.dog, self.cat))
        self.assertEqual([], self.cap.interstitial_chunks(chunks[0],
                                                          chunks[1]))
        self.assertEqual(['chases'],
                         [t.text for t in
                          self.cap.interstitial_tokens(self.dog, self.cat)])

    def test_strings(self):
        "other renderings"
        self.assertEqual('NP VP NP', self.cap.to_chunk_type_string())
        self.assertEqual('The dog chases a cat', self.cap.text())
        self.assertEqual('(DT The) (NN dog) (VBZ chases) (DT a) (NN cat)',
                         self.cap.to_pos_string())
        self.assertEqual(['The DT B-NP', 'dog NN I-NP', 'chases VBZ B-VP',
                          'a DT B-NP', 'cat NN I-NP'],
                         self.cap.to_conll_strings())
        self.assertEqual('x.jpg#0;mention:1', self.cat.unique_id())
        self.assertEqual('x.jpg#0;token:2', self.cap.tokens[2].unique_id())

    def test_chunkless(self):
        "tokens outside of chunks"
        cap = parse_coref_string('[NP dogs/NNS ] and/CC [NP cats/NNS ]',
                                 RES, doc_id='x.jpg', idx=0)
        self.assertEqual('NP and NP', cap.to_chunk_type_string())
        self.assertEqual('NP NP',
                         cap.to_chunk_type_string(include_chunkless=False))

    def test_predicted_conll(self):
        "gold and predicted chunk labels side by side"
        pred = parse_coref_string('[NP The/DT dog/NN chases/VBZ ] '
                                  '[NP a/DT ] [NP cat/NN ]',
                                  RES, doc_id='x.jpg', idx=0)
        self.assertEqual(['The DT B-NP B-NP', 'dog NN I-NP I-NP',
                          'chases VBZ B-VP I-NP', 'a DT B-NP B-NP',
                          'cat NN I-NP B-NP'],
                         self.cap.to_conll_strings(predicted=pred))

    def test_build(self):
        "building a caption by hand"
        cap = Caption('x.jpg', 0)
        for word, tag in [('Two', 'CD'), ('dogs', 'NNS'), ('run', 'VBP')]:
            cap.add_token(word, lemma=_lemmatize(word), pos=tag)
        cap.add_chunk(2, 3, 'VP', idx=1)
        cap.add_chunk(0, 2, 'NP', idx=0)
        self.assertEqual(['NP', 'VP'], [c.chunk_type for c in cap.chunks])
        self.assertRaises(StructuralInvariantViolation,
                          cap.add_chunk, 1, 3, 'NP')
        self.assertRaises(StructuralInvariantViolation,
                          cap.add_chunk, 1, 1, 'NP')
        self.assertRaises(StructuralInvariantViolation,
                          cap.add_chunk, 2, 4, 'NP')
        self.assertRaises(ConfigurationError, cap.add_mention, '5', 0, 2)
        mention = cap.add_mention('5', 0, 2, lexical_type='animals',
                                  cardinality=Cardinality(1, 2))
        self.assertEqual([0], [c.idx for c in mention.chunks])
        self.assertRaises(StructuralInvariantViolation,
                          cap.add_mention, '6', 1, 2, resources=RES)
        cap.validate()
        self.assertEqual(SPEC_LINE.split('\t')[1],
                         cap.to_coref_string(include_id=False))

    def test_validate(self):
        "broken index maps are caught"
        self.cap.validate()
        self.cap.chunk_index[2] = 0
        self.assertRaises(StructuralInvariantViolation, self.cap.validate)

    def test_labeled_tokens(self):
        "building a caption from tagger output"
        ltoks = [LabeledToken('Two', pos='CD', chunk_idx=0, mention_idx=0,
                              chunk_type='NP', chain_id='5'),
                 LabeledToken('dogs', pos='NNS', chunk_idx=0, mention_idx=0,
                              chunk_type='NP', chain_id='5'),
                 LabeledToken('run', pos='VBP', chunk_idx=1,
                              chunk_type='VP')]
        cap = Caption.from_labeled_tokens('1000092795.jpg', 0, ltoks, RES)
        self.assertEqual(SPEC_LINE, cap.to_coref_string())
        self.assertEqual('dog', cap.tokens[1].lemma)
        cap.validate()

    def test_mention_inside_chunk(self):
        "mentions that would split a chunk are refused"
        ltoks = [LabeledToken('the', pos='DT', chunk_idx=0,
                              chunk_type='NP'),
                 LabeledToken('dog', pos='NN', chunk_idx=0, mention_idx=0,
                              chunk_type='NP', chain_id='1')]
        self.assertRaises(StructuralInvariantViolation,
                          Caption.from_labeled_tokens, 'x.jpg', 0, ltoks,
                          RES)
        cap = Caption('x.jpg', 0)
        for word, tag in [('the', 'DT'), ('dog', 'NN'), ('runs', 'VBZ')]:
            cap.add_token(word, lemma=_lemmatize(word), pos=tag)
        cap.add_mention('1', 1, 2, resources=RES)
        self.assertRaises(StructuralInvariantViolation,
                          cap.add_chunk, 0, 2, 'NP')
        cap.add_chunk(1, 2, 'NP')
        cap.add_chunk(2, 3, 'VP')
        cap.validate()
        line = cap.to_coref_string()
        self.assertEqual('x.jpg#0\tthe/DT '
                         '[EN/1 [NP dog/NN ] ] [VP runs/VBZ ]', line)
        reread = parse_coref_string(line, RES)
        self.assertEqual(line, reread.to_coref_string())

    def test_no_lemmatizer(self):
        "lemmatizing needs a lemmatizer"
        bare = RES.with_lemmatizer(None)
        self.assertRaises(ConfigurationError,
                          parse_coref_string, SPEC_LINE, bare)

# ---------------------------------------------------------------------
# mentions
# ---------------------------------------------------------------------


class MentionTest(unittest.TestCase):
    "mention attributes"

    def test_lexical_type(self):
        "lexicon and pronoun lookup"
        self.assertEqual('people', lexical_type_of(_tokens('A/DT man/NN'),
                                                   RES))
        self.assertEqual('people',
                         lexical_type_of(_tokens('a/DT baseball/NN '
                                                 'player/NN'), RES))
        self.assertEqual('people/animals', lexical_type_of(_tokens('he/PRP'),
                                                           RES))
        self.assertEqual('people', lexical_type_of(_tokens('who/WP'), RES))
        self.assertEqual('other', lexical_type_of(_tokens('it/PRP'), RES))
        self.assertEqual('people', lexical_type_of(_tokens('someone/NN'), RES))
        self.assertEqual('other', lexical_type_of(_tokens('everyone/NN'), RES))
        self.assertEqual('other', lexical_type_of(_tokens('a/DT thing/NN'),
                                                  RES))
        self.assertEqual('other', lexical_type_of(_tokens('a/DT ball/NN'),
                                                  RES))

    def test_type_match(self):
        "partial matches on multiple types"
        cap = parse_entities_string('[/EN#1/people/animals he] sees '
                                    '[/EN#2/animals a dog] and '
                                    '[/EN#3/scene a park]',
                                    'x.jpg', 0, RES)
        he, dog, park = cap.mentions
        self.assertEqual('people/animals', he.lexical_type)
        self.assertEqual(1.0, lexical_type_match(dog, dog))
        self.assertEqual(0.5, lexical_type_match(he, dog))
        self.assertEqual(0.0, lexical_type_match(dog, park))

    def test_gender(self):
        "gender from head and gendered words"
        cap = parse_entities_string('[/EN#1/people The woman] and '
                                    '[/EN#2/people a man] walk '
                                    '[/EN#3/animals the dog] with '
                                    '[/EN#4/people a female runner]',
                                    'x.jpg', 0, RES)
        self.assertEqual(['female', 'male', 'neuter', 'female'],
                         [m.gender() for m in cap.mentions])

    def test_modifiers(self):
        "numeric and other modifiers"
        cap = parse_coref_string('[EN/1 [NP the/DT two/CD big/JJ dogs/NNS ] ]',
                                 RES, doc_id='x.jpg', idx=0)
        mention = cap.mentions[0]
        self.assertEqual(('two', 'big'), mention.modifiers(RES))
        self.assertEqual('dogs', mention.head.text)
        self.assertEqual((0, 3), mention.token_range())

    def test_pronoun_type(self):
        "pronouns"
        cap = parse_coref_string('[EN/1 [NP They/PRP ] ] [VP run/VBP ]',
                                 RES, doc_id='x.jpg', idx=0)
        self.assertEqual('subjective',
                         cap.mentions[0].pronoun_type(RES).value)
        self.assertEqual('1|0+', str(cap.mentions[0].cardinality))

    def test_pronoun_head(self):
        "mentions headed by a pronoun are pronouns"
        cap = parse_coref_string('[EN/1 [NP the/DT other/JJ one/NN ] ]',
                                 RES, doc_id='x.jpg', idx=0)
        mention = cap.mentions[0]
        self.assertEqual(PronounType.SPECIAL, mention.pronoun_type(RES))
        self.assertEqual('1|1', str(mention.cardinality))
        self.assertEqual('other', mention.lexical_type)

# ---------------------------------------------------------------------
# cardinality
# ---------------------------------------------------------------------


class CardinalityTest(unittest.TestCase):
    "cardinality inference and comparison"

    def test_collective(self):
        "two teams: two sets of several elements"
        card = _card('two/CD teams/NNS')
        self.assertEqual(Cardinality(2, 1, elem_ambiguous=True), card)
        self.assertEqual('2|1+', str(card))
        self.assertEqual(4, card.value())
        self.assertEqual('1|1+', str(_card('a/DT team/NN')))
        self.assertEqual('1+|1+', str(_card('teams/NNS')))

    def test_singular_artifact(self):
        "a pair of scissors is two of something, but one thing"
        card = _card('a/DT pair/NN of/IN scissors/NNS')
        self.assertEqual('1|2', str(card))
        self.assertEqual(2, card.value())

    def test_of(self):
        "X of Y"
        self.assertEqual('1|2', str(_card('a/DT couple/NN of/IN dogs/NNS')))
        self.assertEqual('1|3', str(_card('a/DT group/NN of/IN three/CD '
                                          'men/NNS')))
        self.assertEqual('1+|100', str(_card('hundreds/NNS of/IN '
                                             'people/NNS')))
        self.assertEqual('1|1', str(_card('a/DT glass/NN of/IN '
                                          'water/NN')))
        self.assertEqual('1|1', str(_card('the/DT side/NN of/IN the/DT '
                                          'road/NN')))

    def test_numerals(self):
        "numerals, ranges and quantifiers"
        self.assertEqual('1|2', str(_card('Two/CD dogs/NNS')))
        self.assertEqual('1|4+', str(_card('five/CD to/TO six/CD '
                                           'dogs/NNS')))
        self.assertEqual('1|4+', str(_card('5-6/CD dogs/NNS')))
        self.assertEqual('1|21', str(_card('twenty-one/CD dogs/NNS')))
        self.assertEqual('1|2+', str(_card('several/JJ dogs/NNS')))
        self.assertEqual('1|12', str(_card('a/DT dozen/NN eggs/NNS')))
        self.assertEqual('1|1', str(_card('a/DT 1990/CD car/NN')))
        self.assertEqual('1|1+', str(_card('dogs/NNS')))
        self.assertEqual('1|1', str(_card('a/DT dog/NN')))

    def test_read_numeral(self):
        "numeral tokens"
        self.assertEqual((3, False), read_numeral('three', RES))
        self.assertEqual((1200, False), read_numeral('1,200', RES))
        self.assertEqual((21, False), read_numeral('twenty-one', RES))
        self.assertEqual((5, True), read_numeral('5-6', RES))
        self.assertEqual(None, read_numeral('dog', RES))

    def test_special(self):
        "pronouns, mass nouns and non-visual heads"
        self.assertEqual('1|0+', str(_card('they/PRP')))
        self.assertEqual('1|1', str(_card('she/PRP')))
        self.assertEqual(MASS, _card('water/NN'))
        self.assertEqual(MASS, _card('some/DT water/NN'))
        self.assertEqual(None, _card('some/DT time/NN'))
        self.assertEqual(None, infer_cardinality([], RES))

    def test_strings(self):
        "compact string form"
        for text in ['1|2', '2+|3', '1|1+', '12|0']:
            self.assertEqual(text, str(Cardinality.from_string(text)))
        self.assertEqual(MASS, Cardinality.from_string('mass'))
        self.assertEqual('mass', str(MASS))
        for text in ['', 'x|y', '1|2|3', '1+', '|2', '1|2++']:
            self.assertRaises(ValueError, Cardinality.from_string, text)

    def test_unify(self):
        "most specific cardinality"
        c12 = Cardinality.from_string('1|2')
        c13 = Cardinality.from_string('1|3')
        c12p = Cardinality.from_string('1|2+')
        c11p = Cardinality.from_string('1|1+')
        self.assertEqual(c12, unify(MASS, c12))
        self.assertEqual(c12, unify(c12, MASS))
        self.assertEqual(c12, unify(None, c12))
        self.assertEqual(c12, unify(c13, c12))
        self.assertEqual(c13, unify(c12p, c13))
        self.assertEqual(c12p, unify(c11p, c12p))
        self.assertEqual(None, unify(None, None))

    def test_approx_equal(self):
        "could be the same quantity"
        def app(card1, card2):
            "shorthand"
            return approx_equal(Cardinality.from_string(card1),
                                Cardinality.from_string(card2))
        self.assertTrue(app('1|2+', '1|5'))
        self.assertTrue(app('1|5', '1|2+'))
        self.assertFalse(app('1|5+', '1|3'))
        self.assertFalse(app('1|2', '1|3'))
        self.assertTrue(app('2|1', '1|2'))
        self.assertTrue(app('1|2+', '2+|1'))
        self.assertTrue(app('mass', '1|1'))
        self.assertTrue(approx_equal(None, None))
        self.assertFalse(approx_equal(None, MASS))

# ---------------------------------------------------------------------
# dependency trees
# ---------------------------------------------------------------------


class DependencyTest(unittest.TestCase):
    "dependency trees"

    def setUp(self):
        self.tokens = _tokens('The/DT dog/NN sits/VBZ')

    def test_any_order(self):
        "edges can come in any order"
        edges = ['1|det|0', '2|nsubj|1', '-1|ROOT|2']
        for order in [edges, list(reversed(edges)),
                      [edges[1], edges[0], edges[2]]]:
            root = build_dependency_tree(self.tokens, order)
            self.assertEqual('sits', root.token.text)
            self.assertEqual(3, len(root.all_nodes()))
            self.assertEqual(2, root.find(self.tokens[0]).depth)
            self.assertTrue(root.find(self.tokens[0]).is_leaf())
            self.assertFalse(root.is_leaf())
            self.assertEqual('sits\n  |--[nsubj]->dog\n    |--[det]->The',
                             root.pretty())

    def test_two_roots(self):
        "multi-rooted parses are not supported"
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            root = build_dependency_tree(self.tokens,
                                         ['-1|ROOT|0', '-1|ROOT|2',
                                          '2|nsubj|1'])
        self.assertEqual(None, root)
        self.assertEqual(1, len(caught))

    def test_no_root(self):
        "nothing to hang the tree from"
        self.assertEqual(None, build_dependency_tree(self.tokens,
                                                     ['2|nsubj|1']))

    def test_orphans(self):
        "edges we cannot attach are dropped"
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            root = build_dependency_tree(self.tokens,
                                         [(-1, 'ROOT', 2), (0, 'det', 1)])
        self.assertEqual(1, len(root.all_nodes()))
        self.assertEqual(1, len(caught))

    def test_parse_edge(self):
        "edge strings"
        self.assertEqual((-1, 'ROOT', 2), parse_dependency_string('-1|ROOT|2'))
        self.assertEqual((12, 'prep_on', 3),
                         parse_dependency_string('12|prep_on|3'))
        for bad in ['1|det', 'a|det|2', '1||2', '1|det|2|3']:
            self.assertRaises(DependencyFormatError,
                              parse_dependency_string, bad)

    def test_caption_syntax(self):
        "subjects, objects and relations out of mentions"
        cap = parse_coref_string(CHASE_LINE, RES, doc_id='x.jpg', idx=0)
        dog, cat = cap.mentions
        self.assertEqual(None, cap.subject_of(dog))
        root = cap.set_dependencies(CHASE_EDGES)
        self.assertEqual('chases', root.token.text)
        self.assertEqual(cap.chunks[1], cap.subject_of(dog))
        self.assertEqual(None, cap.object_of(dog))
        self.assertEqual(cap.chunks[1], cap.object_of(cat))
        self.assertEqual(None, cap.subject_of(cat))
        self.assertEqual(set(['nsubj']),
                         root.out_relations(dog, cap.mention_index))
        the_node = root.find(cap.tokens[0])
        self.assertEqual([0, 1],
                         the_node.governing_chunk_indices(cap.chunk_index))
        cat_node = root.find(cap.tokens[4])
        self.assertEqual(['dog', 'chases'],
                         [n.token.text for n in cat_node.preceding_nodes()])
        self.assertTrue(root.has_node(cat_node))
        self.assertEqual(['The', 'dog'],
                         [n.token.text for n in root.nodes_for(dog)])

    def test_dot(self):
        "graphviz rendering"
        root = build_dependency_tree(self.tokens,
                                     ['1|det|0', '2|nsubj|1', '-1|ROOT|2'])
        dot = root.to_dot()
        self.assertEqual(3, len(dot.get_nodes()))
        self.assertEqual(2, len(dot.get_edges()))
        self.assertTrue('nsubj' in dot.to_string())

# ---------------------------------------------------------------------
# documents
# ---------------------------------------------------------------------


class DocumentTest(unittest.TestCase):
    "documents, chains and boxes"

    def setUp(self):
        self.docs = _read_docs()
        self.doc = self.docs['img.jpg']

    def test_grouping(self):
        "captions for one image need not be adjacent"
        self.assertEqual(set(['img.jpg', 'other.jpg']), set(self.docs))
        self.assertEqual([0, 1], [c.idx for c in self.doc.captions])
        self.assertEqual(1, len(self.docs['other.jpg'].captions))

    def test_chains(self):
        "chains leave out non-visual mentions"
        self.assertEqual(set(['1', '2']), set(self.doc.chains))
        self.assertEqual(set([(0, 0), (1, 0)]),
                         self.doc.chain('1').mention_keys)
        self.assertEqual(['a horse', 'a brown horse'],
                         [m.text() for m in self.doc.chain_mentions('2')])
        self.assertRaises(StructuralInvariantViolation, self.doc.chain, '0')
        self.assertRaises(KeyError, self.doc.mention, (5, 0))
        self.assertEqual('the sun', self.doc.mention((1, 2)).text())
        self.assertFalse(self.doc.mention((1, 2)).is_visual())
        self.assertEqual('img.jpg;chain:1', self.doc.chain('1').unique_id())

    def test_late_caption(self):
        "adding captions after the chains are built"
        self.assertEqual(2, len(self.doc.chain('1').mention_keys))
        self.doc.add_caption(parse_coref_string('img.jpg#2\t[EN/1 '
                                                '[NP He/PRP ] ]', RES))
        self.assertEqual(3, len(self.doc.chain('1').mention_keys))

    def test_late_mention(self):
        "adding mentions to captions after the chains are built"
        self.doc.add_bounding_box(BoundingBox(1, 0, 0, 10, 10), ['1'])
        self.assertEqual(['1', '2'], sorted(self.doc.chains))
        cap = parse_coref_string('img.jpg#2\t[EN/1 [NP He/PRP ] ] '
                                 '[VP sits/VBZ ] on/IN a/DT bench/NN', RES)
        self.doc.add_caption(cap)
        cap.add_mention('3', 4, 5, resources=RES)
        self.assertEqual(['1', '2', '3'], sorted(self.doc.chains))
        self.assertEqual([(2, 1)], list(self.doc.chain('3').mention_keys))
        self.assertEqual(set([1]), self.doc.chain('1').box_ids)

    def test_chain_cardinality(self):
        "unified cardinalities"
        self.assertEqual('1|1', str(self.doc.unified_cardinality('1')))
        self.assertTrue(self.doc.has_unifiable_cardinalities('1'))
        other = self.docs['other.jpg']
        other.add_caption(parse_coref_string('other.jpg#1\t[EN/3 '
                                             '[NP Two/CD dogs/NNS ] ]', RES))
        self.assertEqual('1|2', str(other.unified_cardinality('3')))
        self.assertTrue(other.has_unifiable_cardinalities('3'))
        other.add_caption(parse_coref_string('other.jpg#2\t[EN/3 '
                                             '[NP a/DT dog/NN ] ]', RES))
        self.assertFalse(other.has_unifiable_cardinalities('3'))

    def _add_boxes(self):
        box0 = BoundingBox(0, 10, 10, 50, 90)
        box1 = BoundingBox(1, 40, 40, 100, 100)
        self.doc.add_bounding_box(box0, ['1'])
        self.doc.add_bounding_box(box1, ['1', '2'])
        return box0, box1

    def test_boxes(self):
        "boxes tied to chains"
        box0, box1 = self._add_boxes()
        man = self.doc.mention((0, 0))
        horse = self.doc.mention((0, 1))
        self.assertEqual([box0, box1], self.doc.boxes_for_mention(man))
        self.assertEqual([box1], self.doc.boxes_for_mention(horse))
        self.assertEqual([], self.doc.boxes_for_mention(
            self.doc.mention((1, 2))))
        self.assertTrue(self.doc.boxes_are_subset(horse, man))
        self.assertFalse(self.doc.boxes_are_subset(man, horse))
        self.assertEqual([('2', '1')], self.doc.box_subset_chains())
        self.assertEqual(4, len(self.doc.mentions_for_box(box1)))
        self.assertEqual(2, len(self.doc.mentions_for_box(box0)))

    def test_unknown_chain(self):
        "boxes for chains we do not have"
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            self.doc.add_bounding_box(BoundingBox(0, 0, 0, 5, 5), ['9'])
            self.doc.set_scene_chains(['8'])
        self.assertEqual(2, len(caught))
        self.assertFalse(any(c.has_boxes() for c in self.doc.chains.values()))

    def test_box_geometry(self):
        "areas and overlaps"
        box0 = BoundingBox(0, 10, 10, 50, 90)
        box1 = BoundingBox(1, 40, 40, 100, 100)
        self.assertEqual(3200, box0.area())
        self.assertAlmostEqual(500.0 / 6300, box0.iou(box1))
        self.assertAlmostEqual(1.0, box0.iou(box0))
        self.assertEqual(0.0, box0.iou(BoundingBox(2, 60, 0, 70, 5)))
        self.assertTrue(box0.same_coordinates(BoundingBox(5, 10, 10, 50, 90)))
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            BoundingBox(3, 10, 10, 5, 20)
        self.assertEqual(1, len(caught))
        self.assertEqual(None, self.doc.area())

    def test_box_coverage(self):
        "how much of the image the chain boxes cover"
        self._add_boxes()
        self.assertEqual(None, self.doc.box_coverage())
        self.doc.width, self.doc.height = 500, 333
        self.assertAlmostEqual(6300.0 / (500 * 333), self.doc.box_coverage())
        self.doc.add_bounding_box(BoundingBox(2, 0, 0, 600, 400), ['2'])
        self.assertAlmostEqual(1.0, self.doc.box_coverage())

    def test_subset_chains(self):
        "subsets from boxes and from wording, closed under transitivity"
        doc = Document('x.jpg', [
            parse_coref_string('x.jpg#0\t[EN/1 [NP Three/CD dogs/NNS ] ] '
                               '[VP run/VBP ] and/CC [EN/2 [NP one/CD ] ] '
                               '[PP of/IN ] [EN/1 [NP them/PRP ] ] '
                               '[VP is/VBZ ] [ADJP black/JJ ]', RES),
            parse_coref_string('x.jpg#1\t[EN/3 [NP A/DT dog/NN ] ] '
                               '[VP barks/VBZ ]', RES)])
        doc.add_bounding_box(BoundingBox(1, 0, 0, 10, 10), ['3', '2'])
        doc.add_bounding_box(BoundingBox(2, 20, 20, 30, 30), ['2'])
        self.assertEqual([('3', '2')], doc.box_subset_chains())
        self.assertEqual([('2', '1')], doc.wording_subset_chains(RES))
        self.assertEqual([('2', '1'), ('3', '1'), ('3', '2')],
                         doc.subset_chains(RES))
        pairs = doc.subset_mentions(RES)
        self.assertEqual(5, len(pairs))
        self.assertTrue('doc:x.jpg;caption_1:0;mention_1:1;'
                        'caption_2:0;mention_2:2' in pairs)

    def test_subset_boxes_win(self):
        "the boxes overrule the wording"
        doc = Document('x.jpg', [
            parse_coref_string('x.jpg#0\t[EN/1 [NP Three/CD dogs/NNS ] ] '
                               '[VP run/VBP ] and/CC [EN/2 [NP one/CD ] ] '
                               '[PP of/IN ] [EN/1 [NP them/PRP ] ]', RES)])
        doc.add_bounding_box(BoundingBox(1, 0, 0, 10, 10), ['1', '2'])
        doc.add_bounding_box(BoundingBox(2, 20, 20, 30, 30), ['2'])
        self.assertEqual([('1', '2')], doc.subset_chains(RES))

    def test_appositive_subsets(self):
        "mentions set off by commas after the first one"
        doc = Document('y.jpg', [
            parse_coref_string('y.jpg#0\t[EN/1 [NP Two/CD men/NNS ] ] ,/, '
                               '[EN/2 [NP a/DT man/NN ] ] ,/, [VP sit/VBP ]',
                               RES)])
        self.assertEqual([('2', '1')], doc.wording_subset_chains(RES))
        listing = Document('z.jpg', [
            parse_coref_string('z.jpg#0\t[EN/1 [NP Two/CD men/NNS ] ] ,/, '
                               '[EN/2 [NP a/DT man/NN ] ] and/CC '
                               '[EN/3 [NP a/DT man/NN ] ] [VP sit/VBP ]',
                               RES)])
        self.assertEqual([], listing.wording_subset_chains(RES))

    def test_mention_pairs(self):
        "mention pair identifiers"
        horse = self.doc.mention((0, 1))
        man = self.doc.mention((1, 0))
        pair_str = mention_pair_str(horse, man)
        self.assertEqual('doc:img.jpg;caption_1:0;mention_1:1;'
                         'caption_2:1;mention_2:0', pair_str)
        self.assertEqual(('img.jpg', (0, 1), (1, 0)),
                         read_mention_pair_str(pair_str))
        found = self.doc.mention_pair(pair_str)
        self.assertTrue(found[0] is horse and found[1] is man)
        self.assertRaises(ValueError, self.doc.mention_pair,
                          'doc:img.jpg;caption_1:0')
        self.assertRaises(ValueError, self.doc.mention_pair,
                          pair_str.replace('img.jpg', 'other.jpg'))
        self.assertRaises(KeyError, self.doc.mention_pair,
                          pair_str.replace('mention_2:0', 'mention_2:7'))

    def test_xml(self):
        "reading and writing box annotations"
        anno = read_annotation(ET.fromstring(ANNOTATION_XML))
        self.assertEqual((500, 333), (anno.width, anno.height))
        self.assertEqual([set(['1']), set(['1', '2'])],
                         [c for _, c in anno.boxes])
        self.assertEqual(set(['0']), anno.scene_chains)
        with warnings.catch_warnings(record=True):
            warnings.simplefilter('always')
            apply_annotation(self.doc, anno)
        self.assertEqual(500 * 333, self.doc.area())
        self.assertEqual(set([0, 1]), self.doc.chain('1').box_ids)

        self.doc.set_scene_chains(['2'])
        self.doc.chains['2'].box_ids.clear()
        root = annotation_to_xml(self.doc)
        anno2 = read_annotation(ET.fromstring(ET.tostring(root)))
        self.assertEqual(2, len(anno2.boxes))
        self.assertEqual(set(['1']), anno2.boxes[1][1])
        self.assertEqual(set(['2']), anno2.scene_chains)
        self.assertEqual(set(), anno2.nobox_chains)

    def test_bad_xml(self):
        "missing or duplicated elements"
        self.assertRaises(AnnotationXmlError, read_annotation,
                          ET.fromstring('<annotation/>'))
        self.assertRaises(AnnotationXmlError, read_annotation,
                          ET.fromstring('<annotation><size><width>1</width>'
                                        '<height>x</height></size>'
                                        '</annotation>'))
        self.assertRaises(AnnotationXmlError, read_annotation,
                          ET.fromstring('<annotation><size><width>1</width>'
                                        '<width>2</width><height>1</height>'
                                        '</size></annotation>'))

    def test_conll2012(self):
        "CoNLL-2012 coreference lines"
        lines = self.doc.to_conll2012()
        self.assertEqual(15, len(lines))
        fields = [x.split('\t') for x in lines]
        self.assertEqual(set([13]), set(len(x) for x in fields))
        self.assertEqual(['img.jpg', '0', '0', 'A', 'DT'], fields[0][:5])
        self.assertEqual(['(1', '1)', '-', '(2', '2)'],
                         [x[-1] for x in fields[:5]])
        self.assertEqual('14', fields[14][2])
        self.assertEqual('-', fields[14][-1])
        single = self.docs['other.jpg'].to_conll2012()
        self.assertEqual('(3)', single[0].split('\t')[-1])

    def test_predicted_chains(self):
        "writing out somebody else's chains"
        strings = self.doc.coref_strings(predicted_chains={'9': [(0, 0),
                                                                 (1, 0)]})
        self.assertEqual('img.jpg#0\t[EN/9 [NP A/DT man/NN ] ] '
                         '[VP rides/VBZ ] [EN/0 [NP a/DT horse/NN ] ]',
                         strings[0])
        self.assertEqual(DOC_LINES[0], self.doc.coref_strings()[0])
        self.assertEqual(DOC_LINES[3], self.doc.coref_strings()[1])

# ---------------------------------------------------------------------
# corpus
# ---------------------------------------------------------------------


class CorpusTest(unittest.TestCase):
    "reading whole corpora"

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        os.mkdir(os.path.join(self.tmpdir, 'Sentences'))
        os.mkdir(os.path.join(self.tmpdir, 'Annotations'))
        self._write('Sentences/img.txt',
                    '[/EN#1/people A man] rides [/EN#2/animals a horse]\n'
                    '[/EN#1/people The man] sits on '
                    '[/EN#2/animals a brown horse]\n')
        self._write('Sentences/lone.txt', '[/EN#4/animals A dog]\n')
        self._write('Annotations/img.xml', ANNOTATION_XML)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _write(self, name, text):
        with open(os.path.join(self.tmpdir, name), 'w') as stream:
            stream.write(text)

    def test_files(self):
        "sentences with their annotations"
        reader = EntitiesReader(self.tmpdir, RES)
        files = reader.files()
        self.assertEqual(set(['img.jpg', 'lone.jpg']), set(files))
        self.assertEqual(None, files['lone.jpg'][1])
        self.assertEqual(['img.jpg'], list(reader.files(doc_glob='i*')))
        self.assertEqual(['lone.jpg'],
                         list(reader.filter(files, lambda k: k[0] == 'l')))

    def test_slurp(self):
        "reading and merging"
        reader = EntitiesReader(self.tmpdir, RES)
        with warnings.catch_warnings(record=True):
            warnings.simplefilter('always')
            entities = reader.slurp()
        doc = entities['img.jpg']
        self.assertEqual(2, len(doc.captions))
        self.assertEqual(500, doc.width)
        self.assertEqual(set([0, 1]), doc.chain('1').box_ids)
        self.assertEqual(None, entities['lone.jpg'].width)

        coref = _read_docs()
        self.assertEqual(['other.jpg'], merge_boxes(coref, entities))
        self.assertEqual(set([1]), coref['img.jpg'].chain('2').box_ids)
        self.assertEqual(333, coref['img.jpg'].height)

        table = summary(coref)
        self.assertTrue('captions' in table)
        self.assertTrue('boxes' in table)

    def test_bad_xml_file(self):
        "unparseable box annotations"
        self._write('Annotations/lone.xml', '<annotation><size>')
        self.assertRaises(AnnotationXmlError, read_annotation_file,
                          os.path.join(self.tmpdir, 'Annotations',
                                       'lone.xml'))

    def test_coref_file(self):
        "a coreference file on disk"
        self._write('coref.txt', '\n'.join(DOC_LINES) + '\n')
        docs = read_coref_file(os.path.join(self.tmpdir, 'coref.txt'), RES)
        self.assertEqual(2, len(docs['img.jpg'].captions))
        self.assertEqual(['img.jpg', 'other.jpg'], merge_boxes(docs, {}))
