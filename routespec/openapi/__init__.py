"""API document assembly.

Modules:
    options: OpenApiOptions (info block, output version, secondary URLs)
    generator: OpenApiDocumentGenerator and tag derivation
    merge: merge_documents for secondary documents
"""
