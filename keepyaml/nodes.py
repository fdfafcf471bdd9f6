"""Annotated node arena.

A NodeTree holds every node composed from one text in a flat list. Nodes
refer to each other by their index in that list, and positions are plain
Mark tuples, so a tree is a read-only snapshot of the text it came from.
"""

from collections import namedtuple

import yaml
from yaml.composer import ComposerError
from yaml.constructor import SafeConstructor


class Mark(namedtuple('Mark', ['index', 'line', 'column'])):
    """Position in a YAML text (all fields 0-indexed)."""

    __slots__ = ()

    def __str__(self):
        return "line %d, column %d" % (self.line + 1, self.column + 1)


class Node:
    """Base class for arena nodes.

    start_mark is where the node's properties (``&anchor``, ``!tag``)
    begin; content_mark is where its content begins. They differ only for
    nodes with properties. The content mark of a block collection is its
    first key or ``-`` indicator.
    """
    id = None

    def __init__(self, index, parent, tag, value, start_mark, end_mark):
        self.index = index
        self.parent = parent
        self.tag = tag
        self.value = value
        self.start_mark = start_mark
        self.end_mark = end_mark
        self.anchor = None
        self.content_mark = start_mark

    def __repr__(self):
        return '%s(index=%d, tag=%r, start=%s)' % (
            self.__class__.__name__, self.index, self.tag, self.start_mark)


class ScalarNode(Node):
    """Scalar node; value is the scalar text."""
    id = 'scalar'

    def __init__(self, index, parent, tag, value, start_mark, end_mark,
                 style=None):
        super().__init__(index, parent, tag, value, start_mark, end_mark)
        self.style = style


class CollectionNode(Node):
    """Base class for collection nodes."""

    def __init__(self, index, parent, tag, value, start_mark, end_mark,
                 flow_style=None):
        super().__init__(index, parent, tag, value, start_mark, end_mark)
        self.flow_style = flow_style


class SequenceNode(CollectionNode):
    """Sequence node; value is a list of child indices."""
    id = 'sequence'


class MappingNode(CollectionNode):
    """Mapping node; value is a list of (key index, value index) pairs."""
    id = 'mapping'


class AliasNode(Node):
    """One ``*anchor`` occurrence; value is the index of the anchored node,
    or None for an alias of an undefined anchor (lenient trees only)."""
    id = 'alias'


class NodeTree:
    """Nodes composed from one text.

    Attributes:
        text: The text the nodes were composed from
        nodes: Every node, indexed by Node.index
        root: The document node, or None for an empty stream
    """

    def __init__(self, text, nodes, root=None):
        self.text = text
        self.nodes = nodes
        self.root = root

    def __getitem__(self, index):
        return self.nodes[index]

    def __len__(self):
        return len(self.nodes)

    def target(self, node):
        """Return the anchored node behind an alias, or the node itself."""
        while node.id == 'alias':
            if node.value is None:
                raise ComposerError(None, None,
                                    "found undefined alias", None)
            node = self.nodes[node.value]
        return node

    def last_child(self, node):
        if node.id == 'mapping':
            return self.nodes[node.value[-1][1]]
        return self.nodes[node.value[-1]]

    def true_end(self, node):
        """Return the mark just past the last character rendered for node.

        The end mark PyYAML gives a block collection points at the token
        that closes it, which may sit several lines (and comments) further
        down, so block collections are measured by their last leaf.
        """
        while isinstance(node, CollectionNode) and node.value \
                and not node.flow_style:
            node = self.last_child(node)
        return node.end_mark

    def to_yaml_node(self, node, memo=None):
        """Rebuild a PyYAML node graph for node, sharing aliased nodes."""
        if memo is None:
            memo = {}
        node = self.target(node)
        if node.index in memo:
            return memo[node.index]

        if node.id == 'scalar':
            result = yaml.ScalarNode(node.tag, node.value, style=node.style)
            memo[node.index] = result
        elif node.id == 'sequence':
            result = yaml.SequenceNode(node.tag, [], flow_style=node.flow_style)
            memo[node.index] = result
            for index in node.value:
                result.value.append(self.to_yaml_node(self.nodes[index], memo))
        else:
            result = yaml.MappingNode(node.tag, [], flow_style=node.flow_style)
            memo[node.index] = result
            for key_index, value_index in node.value:
                result.value.append((
                    self.to_yaml_node(self.nodes[key_index], memo),
                    self.to_yaml_node(self.nodes[value_index], memo)))
        return result

    def construct(self, node):
        """Materialize the Python value of node, as yaml.safe_load would."""
        constructor = SafeConstructor()
        return constructor.construct_document(self.to_yaml_node(node))
