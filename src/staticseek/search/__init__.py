"""
Static search index and query engine package.

- normalizer: Case folding and whitespace collapsing shared by index and query
- schema: Ordered field selection with positional weights
- fields: Record field extraction into normalized fragments
- index: Index variants (``linear``) and the builder
- serializer: Versioned JSON artifact encoding/decoding
- engine: Exact/prefix/substring matching and ranking
"""
