"""keepyaml error classes.

Every error raised by the editor derives from KeepYAMLError, which itself
derives from PyYAML's YAMLError, so one ``except yaml.YAMLError`` clause
covers both malformed input and rejected edits.
"""

from yaml import YAMLError


class KeepYAMLError(YAMLError):
    """Base exception for keepyaml errors."""
    pass


class ConstructionError(KeepYAMLError, TypeError):
    """A Document was created from something that is not text."""
    pass


class UnknownValueType(KeepYAMLError, TypeError):
    """A value has no YAML counterpart the editor knows how to write.

    Attributes:
        value: The offending value
    """

    def __init__(self, value, problem=None):
        self.value = value
        self.problem = problem

    def __str__(self):
        where = "unknown value type: %s" % type(self.value).__name__
        if self.problem is not None:
            where += " (%s)" % self.problem
        return where
