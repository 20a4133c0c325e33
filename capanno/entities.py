#!/usr/bin/env python
# -*- coding: utf-8 -*-

# License: BSD3

"""
The entities format, and its XML bounding box annotations.

Captions in the entities format carry no chunk or part of speech
information, only mentions, which are bracketed with their chain id
and lexical type. The closing bracket is glued to the last token ::

    [/EN#5/people Two teams] compete for [/EN#6/other the ball]

Each image also comes with a PASCAL VOC style XML file giving its size
and, for each `<object>`, the chains (`<name>docID_chainID</name>`,
repeatable) it stands for, with either a `<bndbox>` or scene/no box
flags ::

    <annotation>
      <size><width>500</width><height>333</height><depth>3</depth></size>
      <object>
        <name>1000092795.jpg_5</name>
        <bndbox><xmin>1</xmin><ymin>2</ymin><xmax>50</xmax><ymax>80</ymax>
        </bndbox>
      </object>
      <object>
        <name>1000092795.jpg_7</name>
        <scene>1</scene>
        <nobndbox>1</nobndbox>
      </object>
    </annotation>
"""

from collections import namedtuple
import xml.etree.ElementTree as ET

from .caption import Caption
from .coref import FormatError
from .document import BoundingBox
from .internalutil import (AnnotationXmlError, indent_xml,
                           on_single_element, read_int)
from .mention import NONVISUAL_CHAIN


# ---------------------------------------------------------------------
# captions
# ---------------------------------------------------------------------

def _read_open(unit, caption):
    """
    `(chain_id, lexical_type)` from an opening `[/EN#chainID/type` unit;
    the lexical type may itself contain slashes, and may be absent
    (None)
    """
    fields = unit.split('/')
    if len(fields) < 2 or fields[0] != '[' or\
       not fields[1].startswith('EN#') or len(fields[1]) < 4:
        raise FormatError('Malformed mention bracket %s' % unit,
                          caption.doc_id, caption.idx, caption.tokens)
    ltype = '/'.join(fields[2:]) or None
    return fields[1][3:], ltype


def parse_entities_string(text, doc_id, idx, resources):
    """
    Read a caption in the entities format.

    Tokens are lemmatized without a part of speech; mention
    cardinalities (and lexical types, where the bracket has none) are
    inferred from the linguistic resources

    :rtype: `Caption`
    """
    caption = Caption(doc_id, idx)
    pending = None

    def fail(msg):
        "complain about this caption"
        raise FormatError(msg, doc_id, idx, caption.tokens)

    for unit in text.split():
        if unit.startswith('['):
            if pending is not None:
                fail('Unexpected new mention bracket %s' % unit)
            chain_id, ltype = _read_open(unit, caption)
            pending = (len(caption.tokens), chain_id, ltype)
            continue
        closing = unit.endswith(']')
        word = unit[:-1] if closing else unit
        if word:
            lemma = resources.lemmatize(word, None)
            caption.add_token(word, lemma=lemma)
        if closing:
            if pending is None:
                fail('Found unopened closing bracket in %s' % unit)
            start, chain_id, ltype = pending
            if start == len(caption.tokens):
                fail('Empty mention [/EN#%s' % chain_id)
            caption.add_mention(chain_id, start, len(caption.tokens),
                                lexical_type=ltype, resources=resources)
            pending = None
    if pending is not None:
        fail('Unterminated mention bracket [/EN#%s' % pending[1])
    return caption


def to_entities_string(caption, chain_map=None):
    """
    Write a caption in the entities format

    :param chain_map: if given, token offset to chain id, used in place
                      of the mentions' own chain ids (missing entries
                      are written as "0")
    """
    units = []
    for tok in caption.tokens:
        mention = caption.mention_of(tok)
        word = tok.text
        if mention is not None and mention.span.start == tok.idx:
            if chain_map is None:
                chain_id = mention.chain_id
            else:
                chain_id = chain_map.get(tok.idx)
            units.append('[/EN#%s/%s' % (chain_id or NONVISUAL_CHAIN,
                                         mention.lexical_type))
        if mention is not None and mention.span.last() == tok.idx:
            word += ']'
        units.append(word)
    return ' '.join(units)


# ---------------------------------------------------------------------
# box annotations
# ---------------------------------------------------------------------

class ImageAnnotation(namedtuple('ImageAnnotation',
                                 ['width', 'height', 'boxes',
                                  'scene_chains', 'nobox_chains'])):
    """
    The contents of an XML box annotation file.

    `boxes` is a list of `(BoundingBox, chain ids)` pairs; the scene
    and no box chain ids are sets
    """
    pass


def _chain_id_from_name(node):
    name = (node.text or '').strip()
    return name.rpartition('_')[2]


def _read_box(node, idx):
    coords = [on_single_element(node, None, read_int, k)
              for k in ['xmin', 'ymin', 'xmax', 'ymax']]
    return BoundingBox(idx, *coords)


def read_annotation(root):
    """
    Read the contents of a box annotation from its root
    `<annotation>` element

    :rtype: `ImageAnnotation`
    """
    size = on_single_element(root, None, lambda x: x, 'size')
    width = on_single_element(size, None, read_int, 'width')
    height = on_single_element(size, None, read_int, 'height')
    boxes = []
    scene = set()
    nobox = set()
    for obj in root.findall('object'):
        chain_ids = set(_chain_id_from_name(x) for x in obj.findall('name'))
        box_node = on_single_element(obj, False, lambda x: x, 'bndbox')
        if box_node is not False:
            boxes.append((_read_box(box_node, len(boxes)), chain_ids))
        if on_single_element(obj, 0, read_int, 'scene') == 1:
            scene.update(chain_ids)
        if on_single_element(obj, 0, read_int, 'nobndbox') == 1:
            nobox.update(chain_ids)
    return ImageAnnotation(width, height, boxes, scene, nobox)


def read_annotation_file(filename):
    """
    Read an XML box annotation file

    :rtype: `ImageAnnotation`
    """
    try:
        tree = ET.parse(filename)
    except ET.ParseError as oops:
        raise AnnotationXmlError('Could not parse %s: %s' % (filename, oops))
    return read_annotation(tree.getroot())


def apply_annotation(doc, anno):
    """
    Set the image size of a document, and tie its chains to the
    boxes and flags of an image annotation
    """
    doc.width = anno.width
    doc.height = anno.height
    for box, chain_ids in anno.boxes:
        doc.add_bounding_box(box, sorted(chain_ids))
    doc.set_scene_chains(sorted(anno.scene_chains))
    doc.set_orig_nobox_chains(sorted(anno.nobox_chains))


def _text_element(tag, text):
    elm = ET.Element(tag)
    elm.text = str(text)
    return elm


def annotation_to_xml(doc):
    """
    XML box annotation for a document (an `ElementTree.Element`).
    Chains without any box get an object of their own carrying their
    scene and no box flags
    """
    root = ET.Element('annotation')
    root.append(_text_element('filename', doc.doc_id))
    size = ET.Element('size')
    size.append(_text_element('width', doc.width))
    size.append(_text_element('height', doc.height))
    size.append(_text_element('depth', 3))
    root.append(size)
    for box in doc.bounding_boxes():
        obj = ET.Element('object')
        for chain_id in sorted(doc.chains):
            if box.idx in doc.chains[chain_id].box_ids:
                obj.append(_text_element('name',
                                         '%s_%s' % (doc.doc_id, chain_id)))
        bndbox = ET.Element('bndbox')
        for key, val in zip(['xmin', 'ymin', 'xmax', 'ymax'],
                            box.coordinates()):
            bndbox.append(_text_element(key, val))
        obj.append(bndbox)
        root.append(obj)
    for chain_id in sorted(doc.chains):
        chain = doc.chains[chain_id]
        if chain.has_boxes():
            continue
        obj = ET.Element('object')
        obj.append(_text_element('name', '%s_%s' % (doc.doc_id, chain_id)))
        obj.append(_text_element('scene', int(chain.is_scene)))
        obj.append(_text_element('nobndbox', int(chain.is_orig_nobox)))
        root.append(obj)
    indent_xml(root)
    return root
