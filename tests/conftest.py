import sys
import os

_tests_dir = os.path.dirname(os.path.abspath(__file__))
_src_dir   = os.path.abspath(os.path.join(_tests_dir, '..'))

# Run against the source tree, whether or not 'pip install -e .' was done.
if os.path.isfile(os.path.join(_src_dir, 'keepyaml', '__init__.py')):
    sys.path.insert(0, _src_dir)
