"""
keepyaml - Edit YAML documents without losing their formatting

A plain load/modify/dump cycle throws away comments, key order, quoting
and indentation. keepyaml instead diffs the new value against the parsed
document and rewrites only the text spans whose content changed.

Key features:
- Comments, blank lines and key order survive unrelated edits
- New keys are appended below the existing ones, new list items below the
  last item
- Trailing comments ("remarks") readable and writable by path
- Explicit line break and indentation settings, no global state

Example:
    >>> import keepyaml
    >>> doc = keepyaml.loads("name: Alice  # owner\\nage: 30\\n")
    >>> value = doc.value
    >>> value["age"] = 31
    >>> doc.value = value
    >>> str(doc)
    'name: Alice  # owner\\nage: 31\\n'
    >>> doc.get_remark("name")
    'owner'
"""

from keepyaml.composer import compose
from keepyaml.document import Document, UNSET
from keepyaml.error import KeepYAMLError, ConstructionError, UnknownValueType
from keepyaml.nodes import Mark, NodeTree


def loads(text, **options):
    """
    Create a Document from a YAML string.

    Args:
        text: YAML source
        **options: Document options (line_break, indent)

    Returns:
        Document

    Example:
        >>> doc = keepyaml.loads("a: 1")
        >>> doc.value
        {'a': 1}
    """
    return Document(text, **options)


def load(stream, **options):
    """
    Create a Document from a file object or a path.

    Args:
        stream: Readable text file object, or a filesystem path
        **options: Document options (line_break, indent)

    Returns:
        Document

    Example:
        >>> with open('config.yaml') as f:
        ...     doc = keepyaml.load(f)
    """
    if hasattr(stream, 'read'):
        return Document(stream.read(), **options)
    with open(stream, encoding='utf-8', newline='') as f:
        return Document(f.read(), **options)


def dumps(document):
    """Return the current text of a Document."""
    return str(document)


def dump(document, stream):
    """
    Write the current text of a Document to a file object or a path.

    Example:
        >>> doc = keepyaml.load('config.yaml')
        >>> doc.set_remark('server.port', 'changed by deploy')
        True
        >>> keepyaml.dump(doc, 'config.yaml')
    """
    if hasattr(stream, 'write'):
        stream.write(str(document))
        return
    with open(stream, 'w', encoding='utf-8', newline='') as f:
        f.write(str(document))


__version__ = "0.9.0"

__all__ = [
    "Document",
    "UNSET",
    "KeepYAMLError",
    "ConstructionError",
    "UnknownValueType",
    "Mark",
    "NodeTree",
    "compose",
    "load",
    "loads",
    "dump",
    "dumps",
]
