#!/usr/bin/env python3
"""
Setup script for keepyaml.

keepyaml is pure Python; parsing, dumping and loading are done by PyYAML.

Extras:
- test : pytest, for running the suite under tests/
"""

import os
from setuptools import setup


def read_version():
    """Read __version__ from the package without importing it."""
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                        'keepyaml', '__init__.py')
    with open(path, encoding='utf-8') as f:
        for line in f:
            if line.startswith('__version__'):
                return line.split('=', 1)[1].strip().strip('"\'')
    raise RuntimeError("unable to find __version__ in %s" % path)


def read_long_description():
    """Use the package docstring as the long description."""
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                        'keepyaml', '__init__.py')
    with open(path, encoding='utf-8') as f:
        source = f.read()
    return source.split('"""')[1].strip()


setup(
    name='keepyaml',
    version=read_version(),
    description='Format-preserving YAML document editor',
    long_description=read_long_description(),
    long_description_content_type='text/plain',
    python_requires='>=3.8',
    packages=['keepyaml'],
    package_data={'keepyaml': ['*.pyi']},
    install_requires=[
        'PyYAML>=5.4',
    ],
    extras_require={
        'test': ['pytest>=7'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Topic :: Text Processing :: Markup',
    ],
)
