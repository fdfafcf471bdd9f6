"""Minimal-diff patching of YAML text.

Every function here addresses the text through positions of a single
NodeTree snapshot; the Splicer maps those positions onto the text as it
changes, so edits can be issued one after another without re-composing.
Edits are issued in source order, nested edits before the edits of the
collections that contain them.
"""

import logging

from yaml.composer import ComposerError

from keepyaml.composer import compose
from keepyaml.representer import clean_dump, render_scalar, indent
from keepyaml.resolver import (
    MAP_TAG, SEQ_TAG, MERGE_TAG, is_collection, values_equal,
)

logger = logging.getLogger(__name__)

SPACE = ' '
DASH = '-'
LINE_BREAKS = '\r\n'

_NO_KEY = object()


class Splicer:
    """Working copy of a text, edited with snapshot positions.

    Attributes:
        text: The edited text
        delta: Total length change applied so far
        line_break: Line break written into new fragments
        indent: Indentation step of new nested blocks
    """

    def __init__(self, text, line_break='\n', indent=2):
        self.text = text
        self.delta = 0
        self.line_break = line_break
        self.indent = indent
        self._edits = []

    def locate(self, pos):
        """Map a snapshot position onto the edited text.

        Positions inside a replaced range move to the start of that range.
        """
        for start, end, _ in self._edits:
            if start < pos < end:
                pos = start
                break
        shift = sum(size - (end - start)
                    for start, end, size in self._edits if end <= pos)
        return pos + shift

    def covers(self, pos):
        """Whether an edit already replaced the snapshot position pos."""
        return any(start <= pos < end for start, end, _ in self._edits)

    def splice(self, start, end, fragment):
        """Replace the snapshot range [start, end) and return the length change."""
        lo, hi = self.locate(start), self.locate(end)
        step = len(fragment) - (hi - lo)
        self.text = self.text[:lo] + fragment + self.text[hi:]
        self.delta += step
        self._edits.append((start, end, len(fragment)))
        return step

    def dump(self, value, flow=False):
        return clean_dump(value, self.line_break, self.indent, flow=flow)


def line_start(text, pos):
    return max(text.rfind('\n', 0, pos), text.rfind('\r', 0, pos)) + 1


def line_tail(text, pos):
    """Return where the line holding pos ends, if only blanks or a comment
    follow pos on it; None otherwise."""
    while pos < len(text) and text[pos] in ' \t':
        pos += 1
    if pos < len(text) and text[pos] == '#':
        while pos < len(text) and text[pos] not in LINE_BREAKS:
            pos += 1
    if pos == len(text) or text[pos] in LINE_BREAKS:
        return pos
    return None


def append_point(tree, node):
    end = tree.true_end(node).index
    tail = line_tail(tree.text, end)
    return end if tail is None else tail


def _skip_break(text, pos):
    if text.startswith('\r\n', pos):
        return pos + 2
    if pos < len(text) and text[pos] in LINE_BREAKS:
        return pos + 1
    return pos


def _break_before(text, pos):
    if text[pos - 2:pos] == '\r\n':
        return pos - 2
    return pos - 1


def erase(splicer, tree, start, end):
    """Remove an entry spanning [start, end), with its lines when it owns them."""
    text = tree.text
    first = line_start(text, start)
    tail = line_tail(text, end)
    if tail is None or text[first:start].strip():
        splicer.splice(start, end, '')
    elif first == 0 or _skip_break(text, tail) > tail:
        splicer.splice(first, _skip_break(text, tail), '')
    elif not splicer.covers(first - 1):
        # last line of the text, without a break of its own
        splicer.splice(_break_before(text, first), tail, '')
    else:
        splicer.splice(first, tail, '')


def insert_after(splicer, tree, node, fragment):
    """Put fragment on a new line after node, indented to node's column.

    When the lines before the insertion point were erased up to the start
    of a line, fragment takes over that line instead.
    """
    point = append_point(tree, node)
    indented = indent(fragment, node.content_mark.column, splicer.line_break)
    logger.debug("inserting %d characters at %d", len(indented), point)
    at = splicer.locate(point)
    if at == 0 or splicer.text[at - 1] in LINE_BREAKS:
        splicer.splice(point, point, indented + splicer.line_break)
    else:
        splicer.splice(point, point, splicer.line_break + indented)


def _anchored(node, literal):
    if node.anchor is None:
        return literal
    return '&%s %s' % (node.anchor, literal)


def _render_at(splicer, node, value, column):
    """Render value to stand where node starts, its block lines at column.

    The first line carries no indentation; an anchored block collection
    puts the anchor alone on the first line.
    """
    fragment = indent(splicer.dump(value), column, splicer.line_break)
    if node.anchor is not None and is_collection(value) and value:
        return '&%s' % node.anchor + splicer.line_break + fragment
    return _anchored(node, fragment[column:])


def replace_primitive(splicer, tree, node, value):
    """Replace node's span with the literal of a scalar value.

    A tag on node is dropped, its anchor is kept.
    """
    start = node.start_mark.index
    end = tree.true_end(node).index
    literal = _anchored(node, render_scalar(value))
    if start == end and start > 0 and tree.text[start - 1] not in ' \t':
        literal = SPACE + literal
    splicer.splice(start, end, literal)


def replace_block(splicer, tree, node, value):
    """Replace the document node with value written as a block."""
    text = tree.text
    start = node.start_mark.index
    column = 0
    if node.id != 'scalar' and not node.flow_style:
        column = node.content_mark.column
    fragment = _render_at(splicer, node, value, column)
    if node.anchor is None and is_collection(value) and value \
            and text[line_start(text, start):start].strip():
        # something such as '---' leads the node's line
        fragment = splicer.line_break + indent(
            splicer.dump(value), column, splicer.line_break)
    logger.debug("replacing %s at %s with a new block", node.id, node.start_mark)
    splicer.splice(start, tree.true_end(node).index, fragment)


def replace_flow(splicer, tree, node, value):
    """Rewrite a flow collection in flow style."""
    splicer.splice(node.start_mark.index, node.end_mark.index,
                   _anchored(node, splicer.dump(value, flow=True)))


def replace_value(splicer, tree, key_node, node, value):
    """Replace a mapping value wholesale, from the end of its key."""
    head = ':' if node.anchor is None else ': &%s' % node.anchor
    if is_collection(value) and value:
        depth = key_node.start_mark.column + splicer.indent
        fragment = head + splicer.line_break + indent(
            splicer.dump(value), depth, splicer.line_break)
    elif is_collection(value):
        fragment = head + SPACE + splicer.dump(value)
    else:
        fragment = head + SPACE + render_scalar(value)
    logger.debug("replacing value of %r at %s", key_node.value, node.start_mark)
    splicer.splice(key_node.end_mark.index, tree.true_end(node).index, fragment)


def replace_whole(splicer, tree, node, value, key_node=None):
    """Replace node wherever it sits: in a flow collection, under a key,
    as a sequence entry or as the document node."""
    parent = None if node.parent is None else tree[node.parent]
    if parent is not None and parent.flow_style:
        if is_collection(value):
            literal = splicer.dump(value, flow=True)
        else:
            literal = render_scalar(value)
        splicer.splice(node.start_mark.index, tree.true_end(node).index,
                       _anchored(node, literal))
    elif key_node is not None:
        replace_value(splicer, tree, key_node, node, value)
    elif parent is not None:
        replace_item(splicer, tree, node, value)
    elif is_collection(value):
        replace_block(splicer, tree, node, value)
    else:
        replace_primitive(splicer, tree, node, value)


def _same_kind(node, value):
    if node.id == 'mapping' and node.tag == MAP_TAG:
        return isinstance(value, dict)
    if node.id == 'sequence' and node.tag == SEQ_TAG:
        return isinstance(value, list)
    return False


def _scalar_key(tree, key_index):
    key_node = tree[key_index]
    if key_node.id != 'scalar' or key_node.tag == MERGE_TAG:
        return _NO_KEY
    return tree.construct(key_node)


def own_keys(tree, node):
    """Return the keys a mapping node spells out, merge keys excluded."""
    keys = set()
    for key_index, _ in node.value:
        key = _scalar_key(tree, key_index)
        if key is not _NO_KEY:
            keys.add(key)
    return keys


def drops_merged_key(tree, node, old, new):
    """Whether new lacks a key that node only gets through a merge.

    No override can remove such a key, so node has to be rewritten.
    """
    if node.id != 'mapping' or not isinstance(old, dict):
        return False
    own = own_keys(tree, node)
    return any(key not in own and key not in new for key in old)


def patch_node(splicer, tree, node, old, new):
    """Patch a collection node whose kind matches new."""
    if node.flow_style:
        replace_flow(splicer, tree, node, new)
    elif not new or drops_merged_key(tree, node, old, new):
        replace_block(splicer, tree, node, new)
    elif node.id == 'mapping':
        patch_mapping(splicer, tree, node, old, new)
    else:
        patch_sequence(splicer, tree, node, old, new)


def patch_entry(splicer, tree, key_node, node, old, new):
    """Patch the value of one mapping pair."""
    if node.id == 'scalar' and not is_collection(new):
        replace_primitive(splicer, tree, node, new)
    elif _same_kind(node, new) and new \
            and not drops_merged_key(tree, node, old, new):
        patch_node(splicer, tree, node, old, new)
    else:
        replace_value(splicer, tree, key_node, node, new)


def patch_mapping(splicer, tree, node, old, new):
    """Diff a block mapping against a new dict and splice the changes.

    Pairs are visited in source order: keys gone from new are erased,
    changed values are patched in place. Keys new to the mapping are
    appended after its last pair, in the order of new, and so are
    explicit overrides of changed keys the mapping gets from a merge.
    """
    pending = dict(new)
    for key_index, value_index in node.value:
        key = _scalar_key(tree, key_index)
        if key is _NO_KEY:
            continue
        value_node = tree[value_index]
        if key not in new:
            logger.debug("erasing key %r", key)
            erase(splicer, tree, tree[key_index].start_mark.index,
                  tree.true_end(value_node).index)
            continue
        pending.pop(key, None)
        if value_node.id == 'alias':
            # settled once the anchors are patched
            continue
        old_value = old[key] if key in old else tree.construct(value_node)
        if values_equal(old_value, new[key]):
            continue
        patch_entry(splicer, tree, tree[key_index], value_node,
                    old_value, new[key])

    for key, value in pending.items():
        if key in old and values_equal(old[key], value):
            continue
        if key in old:
            logger.debug("overriding merged key %r", key)
        insert_after(splicer, tree, node, splicer.dump({key: value}))


def _indicator_before(text, pos, column):
    """Return the position of the '-' indicator, at column, opening the
    sequence entry that starts at pos."""
    pos -= 1
    while pos > 0:
        if text[pos] == DASH and pos - line_start(text, pos) == column \
                and text[pos + 1:pos + 2] in ('', SPACE, '\t', '\r', '\n'):
            break
        pos -= 1
    return pos


def replace_item(splicer, tree, node, value):
    """Replace one block sequence entry, keeping its ``-`` indicator."""
    text = tree.text
    sequence = tree[node.parent]
    start = node.start_mark.index
    end = tree.true_end(node).index
    dash = _indicator_before(text, start, sequence.content_mark.column)
    if any(char in LINE_BREAKS for char in text[dash:start]):
        # the entry starts on a line of its own below the indicator
        splicer.splice(start, end,
                       _render_at(splicer, node, value, node.start_mark.column))
        return
    depth = dash - line_start(text, dash) + 2
    splicer.splice(dash + 1, end,
                   SPACE + _render_at(splicer, node, value, depth))


def patch_sequence(splicer, tree, node, old, new):
    """Diff a block sequence against a new list, index by index.

    Differing entries are replaced, surplus entries erased and extra new
    entries appended below the last one.
    """
    items = [tree[index] for index in node.value]
    common = min(len(items), len(new))
    for position in range(common):
        if items[position].id == 'alias':
            continue
        if not values_equal(old[position], new[position]):
            replace_item(splicer, tree, items[position], new[position])

    if len(items) > common:
        for item in items[common:]:
            logger.debug("erasing sequence entry at %s", item.start_mark)
            dash = _indicator_before(tree.text, item.start_mark.index,
                                     node.content_mark.column)
            erase(splicer, tree, dash, tree.true_end(item).index)
    elif len(new) > common:
        insert_after(splicer, tree, node, splicer.dump(new[common:]))


def settle_aliases(text, value, line_break='\n', indent=2):
    """Make aliases and merges in a patched text yield value again.

    Patched nodes keep their anchors, so an alias may now stand for a
    value other than the one assigned at its place, or for an anchor
    that was rewritten away. Such aliases are replaced by literals, and
    mappings whose merged keys went stale get overrides. Rewriting an
    alias can change an anchored node that encloses it, so the text is
    composed again until nothing changes.
    """
    for _ in range(text.count('*') + 1):
        tree = compose(text, lenient=True)
        if tree.root is None:
            break
        splicer = Splicer(text, line_break, indent)
        _settle(splicer, tree, tree.root, value)
        if splicer.text == text:
            break
        text = splicer.text
    return text


def _settle(splicer, tree, node, value, key_node=None):
    if node.id == 'alias':
        if node.value is not None:
            try:
                current = tree.construct(node)
            except ComposerError:
                # encloses an undefined alias, settled on the next pass
                return
            if values_equal(current, value):
                return
        logger.debug("expanding alias at %s", node.start_mark)
        replace_whole(splicer, tree, node, value, key_node)
    elif node.id == 'mapping' and isinstance(value, dict):
        _settle_mapping(splicer, tree, node, value, key_node)
    elif node.id == 'sequence' and isinstance(value, list):
        for index, item in zip(node.value, value):
            _settle(splicer, tree, tree[index], item)


def _settle_mapping(splicer, tree, node, value, key_node):
    stale = []
    merges = any(tree[key_index].tag == MERGE_TAG
                 for key_index, _ in node.value)
    if merges:
        try:
            current = tree.construct(node)
        except ComposerError:
            if any(tree[key_index].tag == MERGE_TAG
                   and tree[value_index].id == 'alias'
                   and tree[value_index].value is None
                   for key_index, value_index in node.value):
                replace_whole(splicer, tree, node, value, key_node)
            return
        own = own_keys(tree, node)
        if drops_merged_key(tree, node, current, value):
            replace_whole(splicer, tree, node, value, key_node)
            return
        stale = [key for key in value if key not in own and not (
            key in current and values_equal(current[key], value[key]))]
        if stale and node.flow_style:
            replace_whole(splicer, tree, node, value, key_node)
            return
    for key_index, value_index in node.value:
        key = _scalar_key(tree, key_index)
        if key is not _NO_KEY and key in value:
            _settle(splicer, tree, tree[value_index], value[key],
                    tree[key_index])
    for key in stale:
        insert_after(splicer, tree, node, splicer.dump({key: value[key]}))
