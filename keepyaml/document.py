"""The Document facade.

A Document owns one YAML text. Reading ``value`` loads the text; assigning
``value`` rewrites only the parts of the text whose content changed.
"""

import logging
import re

import yaml

from keepyaml import patcher
from keepyaml import remark
from keepyaml.composer import compose
from keepyaml.error import ConstructionError
from keepyaml.path import find_node
from keepyaml.representer import clean_dump
from keepyaml.resolver import (
    SCALAR_TAGS, is_collection, resolve_value_tag, values_equal,
)

logger = logging.getLogger(__name__)

LINE_BREAK_CHOICES = ('\n', '\r\n', '\r')

_TRAILING_SPACES = re.compile(r'[ \t]+(?=[\r\n]|\Z)')


class _Unset:
    """Type of the UNSET sentinel."""

    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET = _Unset()


class Document:
    """A YAML text edited through its value.

    Args:
        text: The YAML source
        line_break: Line break written into new text ('\\n', '\\r\\n', '\\r')
        indent: Indentation step used for newly nested blocks

    Raises:
        ConstructionError: if text is not a str

    Example:
        >>> doc = Document("a: 1  # keep\\nb: 2\\n")
        >>> doc.value = {'a': 1, 'b': 3}
        >>> str(doc)
        'a: 1  # keep\\nb: 3\\n'
    """

    def __init__(self, text, line_break='\n', indent=2):
        if not isinstance(text, str):
            raise ConstructionError(
                "text should be a str, not %s" % type(text).__name__)
        if line_break not in LINE_BREAK_CHOICES:
            raise ValueError("unsupported line break: %r" % (line_break,))
        if not isinstance(indent, int) or indent < 1:
            raise ValueError("indent should be a positive int, not %r"
                             % (indent,))
        self._text = text
        self.line_break = line_break
        self.indent = indent

    @property
    def value(self):
        """The Python value of the text (yaml.safe_load)."""
        return yaml.safe_load(self._text)

    @value.setter
    def value(self, new_value):
        current = self.value
        if new_value is not UNSET and values_equal(current, new_value):
            return

        if new_value is UNSET:
            logger.debug("unsetting document")
            self._text = ''
            return

        tree = compose(self._text)
        if tree.root is None:
            text = self._fresh_text(new_value)
        else:
            text = self._patch(tree, current, new_value)
        self._text = self._strip_trailing_spaces(text)

    @value.deleter
    def value(self):
        self.value = UNSET

    def _fresh_text(self, new_value):
        logger.debug("writing value into an empty document")
        resolve_value_tag(new_value)
        fragment = clean_dump(new_value, self.line_break, self.indent)
        if not self._text.strip():
            return fragment + self.line_break
        head = self._text
        if not head.endswith(('\n', '\r')):
            head += self.line_break
        return head + fragment + self.line_break

    def _patch(self, tree, current, new_value):
        root = tree.root
        splicer = patcher.Splicer(self._text, self.line_break, self.indent)
        new_tag = resolve_value_tag(new_value)

        if new_tag != root.tag:
            logger.debug("root changes from %s to %s", root.tag, new_tag)
            if is_collection(new_value):
                patcher.replace_block(splicer, tree, root, new_value)
            else:
                patcher.replace_primitive(splicer, tree, root, new_value)
        elif new_tag in SCALAR_TAGS:
            logger.debug("replacing root scalar")
            patcher.replace_primitive(splicer, tree, root, new_value)
        else:
            logger.debug("patching root %s", root.id)
            patcher.patch_node(splicer, tree, root, current, new_value)

        logger.debug("patched document, %+d characters", splicer.delta)
        text = splicer.text
        if any(node.id == 'alias' for node in tree.nodes):
            text = patcher.settle_aliases(text, new_value, self.line_break,
                                          self.indent)
        return self._checked(text, new_value)

    def _checked(self, text, new_value):
        """Return text if it loads as new_value, else a plain dump of it."""
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            logger.warning("patched text does not load (%s), rewriting", exc)
        else:
            if values_equal(loaded, new_value):
                return text
            logger.warning("patched text loads another value, rewriting")
        return clean_dump(new_value, self.line_break,
                          self.indent) + self.line_break

    @staticmethod
    def _strip_trailing_spaces(text):
        return _TRAILING_SPACES.sub('', text)

    def to_python(self):
        """Return the Python value of the text."""
        return self.value

    def get_remark(self, path):
        """Return the comment trailing the node at path.

        Returns '' when the node has no comment or the path does not exist.
        """
        tree = compose(self._text)
        node = find_node(tree, path)
        if node is None:
            return ''
        return remark.get_remark(tree, node)

    def set_remark(self, path, text):
        """Set the comment trailing the node at path.

        Returns:
            True if the comment was set, False if the path does not exist
        """
        tree = compose(self._text)
        node = find_node(tree, path)
        if node is None:
            return False
        self._text = remark.set_remark(tree, node, text)
        return True

    def __str__(self):
        return self._text

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self._text)
