"""Node lookup by path."""


def split_path(path):
    """Turn a dotted path string into its segments.

    Lists and tuples of segments pass through; '' addresses the root.
    """
    if isinstance(path, str):
        return path.split('.') if path else []
    return list(path)


def _position(segment):
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        return segment
    if isinstance(segment, str) and segment.isdigit():
        return int(segment)
    return None


def find_node(tree, path):
    """Return the node of tree at path, or None if the path leads nowhere."""
    node = tree.root
    for segment in split_path(path):
        if node is None:
            return None
        node = tree.target(node)
        if node.id == 'mapping':
            node = _lookup_key(tree, node, str(segment))
        elif node.id == 'sequence':
            position = _position(segment)
            if position is None or not 0 <= position < len(node.value):
                return None
            node = tree[node.value[position]]
        else:
            return None
    return node


def _lookup_key(tree, node, key):
    for key_index, value_index in node.value:
        key_node = tree.target(tree[key_index])
        if key_node.id == 'scalar' and key_node.value == key:
            return tree[value_index]
    return None
