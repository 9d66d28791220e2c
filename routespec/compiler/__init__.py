"""Build-time route compilation.

Modules:
    path_meta: File path to route metadata
    annotator: Source transform injecting the derived metadata
    build: Build pass over a routes tree
"""
