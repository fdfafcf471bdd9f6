"""Trailing comments ("remarks") of nodes."""

LINE_BREAKS = '\r\n'

BLOCK_STYLES = ('|', '>')


def _scan(text, pos):
    # returns (position of '#' or None, end of the line)
    while pos < len(text) and text[pos] != '#' and text[pos] not in LINE_BREAKS:
        pos += 1
    if pos == len(text) or text[pos] in LINE_BREAKS:
        return None, pos
    hash_pos = pos
    while pos < len(text) and text[pos] not in LINE_BREAKS:
        pos += 1
    return hash_pos, pos


def _body_start(text, pos):
    while pos < len(text) and text[pos] in '# ':
        pos += 1
    return pos


def _remark_start(tree, node):
    """Where the line holding node's remark continues after the node.

    A block scalar's lines are all content, so its remark sits on the
    header line, after the '|' or '>' indicator.
    """
    end = tree.true_end(node).index
    while node.id in ('mapping', 'sequence') and node.value \
            and not node.flow_style:
        node = tree.last_child(node)
    if node.id == 'scalar' and node.style in BLOCK_STYLES:
        return node.content_mark.index + 1
    return end


def get_remark(tree, node):
    """Return the comment trailing node's last line, or ''."""
    text = tree.text
    hash_pos, end = _scan(text, _remark_start(tree, node))
    if hash_pos is None:
        return ''
    return text[_body_start(text, hash_pos):end]


def set_remark(tree, node, remark):
    """Return tree's text with node's trailing comment set to remark."""
    text = tree.text
    hash_pos, end = _scan(text, _remark_start(tree, node))
    if hash_pos is None:
        return text[:end] + ' # ' + remark + text[end:]
    start = _body_start(text, hash_pos)
    return text[:start] + remark + text[end:]
