# License: BSD3

"""
Adapters for tools that live outside of capanno: lemmatizers, and
part of speech taggers or chunkers whose output we can turn into
captions
"""
