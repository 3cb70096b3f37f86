"""Index specification document handling.

This package turns a checked-in index specification (``firestore.indexes.json``)
into canonical expected definitions:
1. Schema — JSON Schema describing the document structure
2. Schema validator — structural walk producing path-qualified issues
3. Loader — parsing plus field-override expansion
"""

SPEC_FORMAT_VERSION = "1"
