"""
capanno setup: capanno is a library for managing and navigating
image caption corpora annotated for chunks, mentions, coreference
chains and bounding boxes
"""

from setuptools import setup, find_packages

REQS = [
    'funcparserlib',
    'pydot',
    'frozendict',
    'tabulate',
    'nltk >= 3.0.0',
]


setup(name='capanno',
      version='0.1',
      packages=find_packages(),
      package_data={'capanno.lexicon': ['data/*.txt',
                                        'data/lexicon/*.txt']},
      install_requires=REQS,
      extras_require={'test': ['pytest']})
