"""Composer that turns PyYAML's event stream into a NodeTree.

The reader, scanner, parser and resolver are PyYAML's own; only node
construction differs from yaml.composer.Composer: nodes go into a flat
arena, carry Mark tuples and alias occurrences keep their own position.
"""

from yaml import nodes as yaml_nodes
from yaml.composer import ComposerError
from yaml.events import (
    StreamEndEvent,
    AliasEvent, ScalarEvent,
    SequenceStartEvent, SequenceEndEvent,
    MappingStartEvent, MappingEndEvent,
)
from yaml.parser import Parser
from yaml.reader import Reader
from yaml.resolver import Resolver
from yaml.scanner import Scanner

from keepyaml.nodes import (
    Mark, NodeTree,
    ScalarNode, SequenceNode, MappingNode, AliasNode,
)


def _mark(mark):
    return Mark(mark.index, mark.line, mark.column)


class Composer(Reader, Scanner, Parser, Resolver):
    """YAML composer - converts one document's events to a NodeTree.

    A lenient composer accepts aliases of undefined anchors (their
    AliasNode.value is None) and anchors defined twice.
    """

    def __init__(self, text, lenient=False):
        Reader.__init__(self, text)
        Scanner.__init__(self)
        Parser.__init__(self)
        Resolver.__init__(self)
        self.text = text
        self.lenient = lenient
        self.anchors = {}
        self.nodes = []

    def get_single_tree(self):
        # Drop StreamStartEvent
        self.get_event()
        root = None
        if not self.check_event(StreamEndEvent):
            root = self.compose_document()
        if not self.check_event(StreamEndEvent):
            event = self.get_event()
            raise ComposerError(
                "expected a single document in the stream", None,
                "but found another document", event.start_mark)
        # Drop StreamEndEvent
        self.get_event()
        return NodeTree(self.text, self.nodes, root)

    def compose_document(self):
        # Drop DocumentStartEvent
        self.get_event()
        node = self.compose_node(None)
        # Drop DocumentEndEvent
        self.get_event()
        self.anchors = {}
        return node

    def compose_node(self, parent):
        if self.check_event(AliasEvent):
            event = self.get_event()
            anchor = event.anchor
            if anchor in self.anchors:
                target = self.anchors[anchor]
                tag, value = target.tag, target.index
            elif self.lenient:
                tag = value = None
            else:
                raise ComposerError(
                    None, None,
                    "found undefined alias %r" % anchor,
                    event.start_mark)
            return self._add(AliasNode(
                len(self.nodes), parent, tag, value,
                _mark(event.start_mark), _mark(event.end_mark)))
        event = self.peek_event()
        anchor = event.anchor
        if anchor is not None:
            if anchor in self.anchors and not self.lenient:
                raise ComposerError(
                    "found duplicate anchor %r; first occurrence"
                    % anchor, None,
                    "second occurrence", event.start_mark)
        if self.check_event(ScalarEvent):
            node = self.compose_scalar_node(parent, anchor)
        elif self.check_event(SequenceStartEvent):
            node = self.compose_sequence_node(parent, anchor)
        elif self.check_event(MappingStartEvent):
            node = self.compose_mapping_node(parent, anchor)
        return node

    def compose_scalar_node(self, parent, anchor):
        event = self.get_event()
        tag = event.tag
        if tag is None or tag == '!':
            tag = self.resolve(yaml_nodes.ScalarNode, event.value,
                               event.implicit)
        end = event.end_mark.index
        if event.style in ('|', '>'):
            # block scalar tokens run on over the line breaks that follow
            while end > event.start_mark.index \
                    and self.text[end - 1] in ' \t\r\n':
                end -= 1
        end_mark = self._mark_at(end, event.end_mark)
        node = ScalarNode(
            len(self.nodes), parent, tag, event.value,
            _mark(event.start_mark), end_mark, style=event.style)
        content = self._skip_properties(event.start_mark.index, end)
        return self._add(node, anchor, self._mark_at(content, event.start_mark))

    def compose_sequence_node(self, parent, anchor):
        start_event = self.get_event()
        tag = start_event.tag
        if tag is None or tag == '!':
            tag = self.resolve(yaml_nodes.SequenceNode, None,
                               start_event.implicit)
        node = self._add(SequenceNode(
            len(self.nodes), parent, tag, [],
            _mark(start_event.start_mark), None,
            flow_style=start_event.flow_style),
            anchor, self._collection_start(start_event))
        while not self.check_event(SequenceEndEvent):
            node.value.append(self.compose_node(node.index).index)
        end_event = self.get_event()
        node.end_mark = _mark(end_event.end_mark)
        return node

    def compose_mapping_node(self, parent, anchor):
        start_event = self.get_event()
        tag = start_event.tag
        if tag is None or tag == '!':
            tag = self.resolve(yaml_nodes.MappingNode, None,
                               start_event.implicit)
        node = self._add(MappingNode(
            len(self.nodes), parent, tag, [],
            _mark(start_event.start_mark), None,
            flow_style=start_event.flow_style),
            anchor, self._collection_start(start_event))
        while not self.check_event(MappingEndEvent):
            key_node = self.compose_node(node.index)
            value_node = self.compose_node(node.index)
            node.value.append((key_node.index, value_node.index))
        end_event = self.get_event()
        node.end_mark = _mark(end_event.end_mark)
        return node

    def _add(self, node, anchor=None, content_mark=None):
        node.anchor = anchor
        if content_mark is not None:
            node.content_mark = content_mark
        if anchor is not None:
            self.anchors[anchor] = node
        self.nodes.append(node)
        return node

    def _collection_start(self, event):
        # the start event ends on the first '[', '{', key or '-' indicator,
        # except for indentless sequences, where it ends past the '-'
        index = event.end_mark.index
        if event.flow_style:
            index -= 1
        elif self.text[index - 1:index] == '-' \
                and self.text[index:index + 1] != '-':
            index -= 1
        return self._mark_at(index, event.end_mark)

    def _skip_properties(self, index, end):
        text = self.text
        while index < end and text[index] in '&!':
            while index < end and text[index] not in ' \t\r\n':
                index += 1
            while index < end and text[index] in ' \t\r\n#':
                if text[index] == '#':
                    while index < end and text[index] not in '\r\n':
                        index += 1
                else:
                    index += 1
        return index

    def _mark_at(self, index, mark):
        if index == mark.index:
            return _mark(mark)
        line_start = max(self.text.rfind('\n', 0, index),
                         self.text.rfind('\r', 0, index)) + 1
        if index < mark.index:
            line = mark.line - self.text.count('\n', index, mark.index)
        else:
            line = mark.line + self.text.count('\n', mark.index, index)
        return Mark(index, line, index - line_start)


def compose(text, lenient=False):
    """Parse text and return its NodeTree.

    The tree's root is None when the text holds no document. PyYAML's
    scanner, parser and composer errors propagate unchanged.
    """
    composer = Composer(text, lenient)
    try:
        return composer.get_single_tree()
    finally:
        composer.dispose()
