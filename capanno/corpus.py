# License: BSD3

"""
Reading whole corpora.

There are two layouts we know about. The coreference corpus is a single
file, one caption per line (see `capanno.coref`), where the captions
for an image may be scattered about. The entities corpus is a pair of
directories ::

    Sentences/1000092795.txt     one caption per line
    Annotations/1000092795.xml   box annotation (see `capanno.entities`)

Both come out as dictionaries from document id (the image file name,
eg. `1000092795.jpg`) to `capanno.document.Document`.
"""

from collections import OrderedDict
import codecs
import glob
import os
import sys

from tabulate import tabulate

from .coref import parse_coref_string
from .document import Document
from .entities import (apply_annotation, parse_entities_string,
                       read_annotation_file)


# ---------------------------------------------------------------------
# coreference corpus
# ---------------------------------------------------------------------

def read_coref_lines(lines, resources):
    """
    Read captions in the coreference format (with their `docID#capIdx`
    prefix), grouping them into documents. Blank lines are skipped

    :rtype: dict(string, Document)
    """
    docs = OrderedDict()
    for line in lines:
        if not line.strip():
            continue
        caption = parse_coref_string(line, resources)
        doc = docs.get(caption.doc_id)
        if doc is None:
            doc = Document(caption.doc_id)
            docs[caption.doc_id] = doc
        doc.add_caption(caption)
    return docs


def read_coref_file(filename, resources):
    """
    Read a file in the coreference format (see `read_coref_lines`)

    :rtype: dict(string, Document)
    """
    with codecs.open(filename, 'r', 'utf-8') as stream:
        return read_coref_lines(stream, resources)


# ---------------------------------------------------------------------
# entities corpus
# ---------------------------------------------------------------------

def read_entities_document(doc_id, sentences, annotations, resources):
    """
    Read a single document of the entities corpus: its captions, one
    per line, and if given, its box annotation file
    """
    doc = Document(doc_id)
    with codecs.open(sentences, 'r', 'utf-8') as stream:
        for idx, line in enumerate(stream):
            if line.strip():
                doc.add_caption(parse_entities_string(line, doc_id, idx,
                                                      resources))
    if annotations is not None:
        apply_annotation(doc, read_annotation_file(annotations))
    return doc


class EntitiesReader(object):
    """
    Reader for the entities corpus layout.

    Like the other corpus readers, this gives you a dictionary of
    files which you are free to slice before reading ::

        reader = EntitiesReader(corpus_dir, resources)
        files = reader.files()
        subfiles = reader.filter(files, lambda k: k.startswith('10'))
        corpus = reader.slurp(subfiles, verbose=True)

    :param root: directory holding `Sentences` and `Annotations`
    :type resources: `LinguisticResources`
    """
    def __init__(self, root, resources):
        self.rootdir = root
        self.resources = resources

    def files(self, doc_glob=None):
        """
        Return a dictionary from document id to a pair of paths: the
        sentences file, and the box annotation file (None if there is
        no such file)

        Parameters
        ----------
        doc_glob : str, optional
            Glob expression for the names of the sentence files
            (without extension); if `None`, all of them
        """
        pattern = os.path.join(self.rootdir, 'Sentences',
                               (doc_glob or '*') + '.txt')
        corpus_files = {}
        for sentences in sorted(glob.glob(pattern)):
            stem = os.path.splitext(os.path.basename(sentences))[0]
            annotations = os.path.join(self.rootdir, 'Annotations',
                                       stem + '.xml')
            if not os.path.exists(annotations):
                annotations = None
            corpus_files[stem + '.jpg'] = (sentences, annotations)
        return corpus_files

    def slurp(self, cfiles=None, doc_glob=None, verbose=False):
        """
        Read the entire corpus if `cfiles` is `None` or else the
        subset specified by `cfiles`.

        Return a dictionary from document id to `Document`

        Parameters
        ----------
        cfiles : dict, optional
            Dict of files like what `files()` would return.
        doc_glob : str, optional
            Glob pattern for document names; ignored if `cfiles`
            is not None.
        verbose : boolean, defaults to False
            If True, print what we're reading to stderr.
        """
        if cfiles is None:
            subcorpus = self.files(doc_glob=doc_glob)
        else:
            subcorpus = cfiles
        return self.slurp_subcorpus(subcorpus, verbose=verbose)

    def slurp_subcorpus(self, cfiles, verbose=False):
        "read the documents in the given dictionary of files"
        corpus = {}
        counter = 0
        for k in sorted(cfiles):
            if verbose:
                sys.stderr.write("\rReading entities corpus [%d/%d]" %
                                 (counter, len(cfiles)))
            sentences, annotations = cfiles[k]
            corpus[k] = read_entities_document(k, sentences, annotations,
                                               self.resources)
            counter = counter + 1
        if verbose:
            sys.stderr.write("\rReading entities corpus [%d/%d done]\n" %
                             (counter, len(cfiles)))
        return corpus

    def filter(self, d, pred):
        """
        Convenience function equivalent to ::

            { k:v for k,v in d.items() if pred(k) }
        """
        return dict((k, v) for k, v in d.items() if pred(k))


# ---------------------------------------------------------------------
# putting them together
# ---------------------------------------------------------------------

def merge_boxes(coref_docs, entities_docs):
    """
    Copy image sizes, boxes and chain flags from the entities corpus
    onto the matching documents of the coreference corpus (destructive).

    Return the ids of the coreference documents with no counterpart in
    the entities corpus
    """
    missing = []
    for doc_id, doc in coref_docs.items():
        other = entities_docs.get(doc_id)
        if other is None:
            missing.append(doc_id)
        else:
            doc.load_boxes_from(other)
    return sorted(missing)


def summary(docs):
    """
    Return a table (as a string) of how many of each kind of thing
    there is in a dictionary of documents
    """
    captions = [c for d in docs.values() for c in d.captions]
    mentions = [m for c in captions for m in c.mentions]
    rows = [["documents", len(docs)],
            ["captions", len(captions)],
            ["tokens", sum(len(c.tokens) for c in captions)],
            ["chunks", sum(len(c.chunks) for c in captions)],
            ["mentions", len(mentions)],
            ["non-visual mentions",
             len([m for m in mentions if not m.is_visual()])],
            ["chains", sum(len(d.chains) for d in docs.values())],
            ["boxes", sum(len(d.boxes) for d in docs.values())]]
    headers = ["", "total"]
    return tabulate(rows, headers=headers)
