"""Tag classification of Python values."""

import datetime
import math

from keepyaml.error import UnknownValueType


NULL_TAG = 'tag:yaml.org,2002:null'
BOOL_TAG = 'tag:yaml.org,2002:bool'
STR_TAG = 'tag:yaml.org,2002:str'
INT_TAG = 'tag:yaml.org,2002:int'
FLOAT_TAG = 'tag:yaml.org,2002:float'
TIMESTAMP_TAG = 'tag:yaml.org,2002:timestamp'
MAP_TAG = 'tag:yaml.org,2002:map'
SEQ_TAG = 'tag:yaml.org,2002:seq'
MERGE_TAG = 'tag:yaml.org,2002:merge'

SCALAR_TAGS = frozenset([
    NULL_TAG, BOOL_TAG, STR_TAG, INT_TAG, FLOAT_TAG, TIMESTAMP_TAG,
])
COLLECTION_TAGS = frozenset([MAP_TAG, SEQ_TAG])


def resolve_value_tag(value):
    """Return the YAML tag a Python value is written with.

    Numbers evenly divisible by 10 resolve to int, every other number to
    float, whatever their Python type.

    Raises:
        UnknownValueType: if the value has no YAML counterpart
    """
    if isinstance(value, list):
        return SEQ_TAG
    if isinstance(value, dict):
        return MAP_TAG
    if value is None:
        return NULL_TAG
    # bool is a subclass of int
    if isinstance(value, bool):
        return BOOL_TAG
    if isinstance(value, (int, float)):
        if value % 10 == 0:
            return INT_TAG
        return FLOAT_TAG
    if isinstance(value, str):
        return STR_TAG
    if isinstance(value, datetime.date):
        return TIMESTAMP_TAG
    raise UnknownValueType(value)


def is_collection(value):
    return isinstance(value, (dict, list))


def values_equal(a, b):
    """Deep equality that tells booleans from numbers.

    Mappings compare regardless of key order, NaN equals NaN.
    """
    if isinstance(a, dict) or isinstance(b, dict):
        if not (isinstance(a, dict) and isinstance(b, dict)):
            return False
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[key], b[key]) for key in a)

    if isinstance(a, list) or isinstance(b, list):
        if not (isinstance(a, list) and isinstance(b, list)):
            return False
        if len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))

    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b

    if isinstance(a, float) and isinstance(b, float):
        if math.isnan(a) and math.isnan(b):
            return True

    if type(a) is not type(b) and not (
            isinstance(a, (int, float)) and isinstance(b, (int, float))):
        return False
    return a == b
