#!/usr/bin/env python
from setuptools import setup, find_packages
import sys

long_description = ''

if 'sdist' in sys.argv:
    with open('README.rst') as f:
        long_description = f.read()


setup(
    name='stardust',
    version='0.1.0',
    description='Beatmap model and star rating calculation for osu! maps',
    packages=find_packages(),
    long_description=long_description,
    license='LGPLv3+',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: GNU Lesser General Public License v3 or later (LGPLv3+)',  # noqa
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Topic :: Games/Entertainment',
    ],
    install_requires=[
        'click',
        'numpy',
        'scipy',
        'toolz',
    ],
    extras_require={
        'test': [
            'hypothesis',
            'pytest',
        ],
        'dev': [
            'flake8',
            'hypothesis',
            'pytest',
        ],
    },
)
