#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# License: BSD3

"""
Dependency trees over caption tokens.

A dependency parse comes to us as an unordered bag of edges
`(governor, relation, dependent)`, where governor and dependent are
token offsets, and a governor of -1 marks the root. In text form, one
edge per string ::

    -1|ROOT|2
    2|nsubj|1
    1|det|0

`build_dependency_tree` turns these into a `DependencyNode` tree. It
only handles single rooted parses; anything else gives you None (and a
warning), which callers should read as "no syntax for this caption".

This builds off the NLTK Tree class: each node is labelled with its
token, and its children are its dependents, in token order.
"""

from bisect import bisect_left
import warnings

import funcparserlib.parser as fp
import nltk.tree
import pydot


class DependencyNode(nltk.tree.Tree):
    """
    A node in a dependency tree.

    Fields:

    * the label is the token for this node
    * relation is the label of the link to the governor (None for
      the root)
    * governor is the governing node (None for the root)
    * depth is the distance from the root
    """
    def __init__(self, token, children=None, relation=None, governor=None):
        nltk.tree.Tree.__init__(self, token, children or [])
        self.relation = relation
        self.governor = governor
        self.depth = 0 if governor is None else governor.depth + 1

    @property
    def token(self):
        "the token at this node"
        return self.label()

    def is_leaf(self):
        "True if nothing depends on this node"
        return len(self) == 0

    def add_dependent(self, token, relation):
        """
        Attach a new node for the given token below this one, keeping
        dependents in token order, and return it
        """
        node = DependencyNode(token, relation=relation, governor=self)
        pos = bisect_left([x.token.idx for x in self], token.idx)
        self.insert(pos, node)
        return node

    def find(self, token):
        """
        The node for the given token in the subtree rooted here
        (depth first search), or None
        """
        if self.token.idx == token.idx:
            return self
        for child in self:
            node = child.find(token)
            if node is not None:
                return node
        return None

    def nodes_for(self, mention):
        """
        Nodes for the tokens of a mention (or chunk), in token order.
        Tokens which are not in the tree are skipped.
        """
        res = []
        for tok in mention.tokens:
            node = self.find(tok)
            if node is not None:
                res.append(node)
        return res

    def governing_chunk_indices(self, chunk_index):
        """
        Indices of the chunks containing the ancestors of this node,
        from the immediate governor up to the root, without
        duplicates. Governors which are not in any chunk are skipped.

        :param chunk_index: token offset to chunk index (see
                            `Caption.chunk_index`)
        :type chunk_index: dict(int, int)
        """
        res = []
        gov = self.governor
        while gov is not None:
            cidx = chunk_index.get(gov.token.idx)
            if cidx is not None and cidx not in res:
                res.append(cidx)
            gov = gov.governor
        return res

    def out_relations(self, mention, mention_index):
        """
        Labels of the links that cross the boundary of the given
        mention, in either direction; use on the root node.

        :param mention_index: token offset to mention index (see
                              `Caption.mention_index`)
        :type mention_index: dict(int, int)
        """
        res = set()
        for node in self.nodes_for(mention):
            gov = node.governor
            if gov is not None and\
               mention_index.get(gov.token.idx) != mention.idx:
                res.add(node.relation)
            for dep in node:
                if mention_index.get(dep.token.idx) != mention.idx:
                    res.add(dep.relation)
        return res

    def preceding_nodes(self):
        """
        Nodes preceding this one in a breadth first, right to left walk
        back up the tree: our left siblings (nearest first), then our
        governor, then the nodes preceding the governor
        """
        res = []
        node = self
        while node.governor is not None:
            gov = node.governor
            pos = next(i for i, x in enumerate(gov) if x is node)
            res.extend(reversed(gov[:pos]))
            res.append(gov)
            node = gov
        return res

    def all_nodes(self):
        """
        All nodes in the subtree rooted here, in depth first pre-order
        """
        res = [self]
        for child in self:
            res.extend(child.all_nodes())
        return res

    def has_node(self, node):
        "True if the node (the very same object) is in this subtree"
        return any(x is node for x in self.all_nodes())

    def pretty(self):
        """
        Multiline rendering of the tree ::

            sits
              |--[nsubj]->dog
                |--[det]->the
        """
        lines = []

        def step(node, offset):
            "recursive helper"
            prefix = ''
            if offset > 0:
                prefix = '  ' * offset + '|--[%s]->' % node.relation
            lines.append(prefix + node.token.text)
            for child in node:
                step(child, offset + 1)
        step(self, 0)
        return '\n'.join(lines)

    def to_dot(self):
        """
        A `DependencyDotGraph` for visualisation
        """
        return DependencyDotGraph(self)


class DependencyDotGraph(pydot.Dot):
    """
    Dot rendering of a dependency tree; the `to_string()` method is
    most likely to be of interest here
    """
    def _add_node(self, node):
        attrs = {'label': node.token.text,
                 'shape': 'plaintext'}
        self.add_node(pydot.Node(self._node_id(node), **attrs))

    def _add_link(self, node):
        attrs = {'label': node.relation}
        self.add_edge(pydot.Edge(self._node_id(node.governor),
                                 self._node_id(node), **attrs))

    @staticmethod
    def _node_id(node):
        return 't%d' % node.token.idx

    def __init__(self, root):
        super(DependencyDotGraph, self).__init__(graph_type='digraph')
        for node in root.all_nodes():
            self._add_node(node)
            if node.governor is not None:
                self._add_link(node)


# ---------------------------------------------------------------------
# building trees
# ---------------------------------------------------------------------

class DependencyFormatError(Exception):
    """
    A dependency edge that we could not read
    """
    def __init__(self, *args, **kw):
        super(DependencyFormatError, self).__init__(*args, **kw)


def _join_int(chars):
    return int(''.join(chars))


_DIGITS = fp.oneplus(fp.some(lambda c: c.isdigit()))
_GOV = fp.maybe(fp.a('-')) + _DIGITS >>\
    (lambda x: -_join_int(x[1]) if x[0] else _join_int(x[1]))
_REL = fp.oneplus(fp.some(lambda c: c != '|')) >> ''.join
_DEP = _DIGITS >> _join_int
_EDGE = _GOV + fp.skip(fp.a('|')) + _REL + fp.skip(fp.a('|')) + _DEP +\
    fp.skip(fp.finished) >> tuple


def parse_dependency_string(text):
    """
    Read an edge in `gov|relation|dep` form into a triple

    :rtype: (int, string, int)
    """
    try:
        return _EDGE.parse(text.strip())
    except fp.NoParseError as oops:
        raise DependencyFormatError('Bad dependency string %r: %s' %
                                    (text, oops))


def build_dependency_tree(tokens, edges):
    """
    Build a dependency tree over the given tokens (indexed by offset)
    from edges in any order.

    Edges may be triples or `gov|relation|dep` strings. We keep
    sweeping over the edges that have not yet been attached, attaching
    any whose governor is already in the tree, until a sweep adds
    nothing.

    Return the root node, or None if there was no root, or more than
    one (multi-rooted parses are not supported). Edges which could not
    be attached are left out, with a warning.
    """
    edges = [parse_dependency_string(e) if isinstance(e, str) else tuple(e)
             for e in edges]
    roots = [e for e in edges if e[0] < 0]
    if len(roots) != 1:
        if roots:
            warnings.warn('Dependency parse with %d roots; '
                          'ignoring it' % len(roots))
        return None
    _, _, root_idx = roots[0]
    root = DependencyNode(tokens[root_idx])
    pending = [e for e in edges if e[0] >= 0]
    added = True
    while pending and added:
        added = False
        still_pending = []
        for gov_idx, relation, dep_idx in pending:
            gov = root.find(tokens[gov_idx])
            if gov is None:
                still_pending.append((gov_idx, relation, dep_idx))
            else:
                gov.add_dependent(tokens[dep_idx], relation)
                added = True
        pending = still_pending
    if pending:
        warnings.warn('Could not attach %d dependency edge(s): %s' %
                      (len(pending),
                       ', '.join('%d|%s|%d' % e for e in pending)))
    return root
