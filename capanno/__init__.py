"""
The capanno library provides utilities for working with image caption
corpora annotated for chunks, mentions and coreference, where the
coreference chains are tied to bounding boxes in the image.

It has a three-layer structure:

* base layer (annotation ordering, word lists and lexicons)
* caption layer (tokens, chunks, mentions, dependency trees, cardinality)
* document layer (chains, boxes, corpus traversal)

Layers
~~~~~~
The base layer provides

* annotation ordering (capanno.annotation): token ranges, and lists of
  annotations kept in order by index

* linguistic resources (capanno.lexicon): the closed word lists and
  lexical type lexicon that the rest of the library consults, bundled
  into an immutable context that you load once and pass around

Building on this, the caption layer

* captions (capanno.caption, capanno.mention): a sentence with its
  tokens, the chunks and mentions over them, and the indices telling
  you which token belongs to what

* formats (capanno.coref, capanno.entities): the two bracketed text
  formats that captions come in, and the XML box annotations

* syntax (capanno.deptree): dependency trees over the tokens

* cardinality (capanno.cardinality): how many things a mention refers
  to, and how sure we are of it

Finally, the document layer (capanno.document, capanno.corpus) gathers
all the captions for an image, works out their coreference chains, and
ties these to the image's bounding boxes ::

      corpus -> document
                   |
                   v
     coref, entities -> caption -> mention -> cardinality
                   |        |
                   v        v
               lexicon   deptree

Tools outside of capanno (lemmatizers, chunkers) are hooked in through
`capanno.external`.
"""
