"""Rendering of fresh YAML fragments."""

import yaml
from yaml.representer import RepresenterError

from keepyaml.error import UnknownValueType


_DOCUMENT_END = '\n...\n'


def _safe_dump(value, **kwargs):
    try:
        return yaml.safe_dump(value, sort_keys=False, allow_unicode=True,
                              width=float('inf'), **kwargs)
    except RepresenterError as exc:
        raise UnknownValueType(value, str(exc)) from exc


def clean_dump(value, line_break='\n', indent=2, flow=False):
    """Dump value to YAML without the trailing line break.

    Block style unless flow is set. The document end marker PyYAML writes
    after a bare root scalar is dropped, and line breaks are rewritten to
    line_break.
    """
    text = _safe_dump(value, default_flow_style=flow, indent=indent)
    if text.endswith(_DOCUMENT_END):
        text = text[:-len(_DOCUMENT_END) + 1]
    if text.endswith('\n'):
        text = text[:-1]
    if line_break != '\n':
        text = text.replace('\n', line_break)
    return text


def render_scalar(value):
    """Return the literal text of a scalar value.

    Strings are always double-quoted, other scalars use their plain form.
    """
    if isinstance(value, str):
        return _safe_dump(value, default_style='"').rstrip('\n')
    return clean_dump(value)


def indent(text, depth, line_break='\n'):
    """Indent every non-blank line of text by depth spaces."""
    pad = ' ' * depth
    return line_break.join(
        pad + line if line.strip() else ''
        for line in text.split(line_break))
