"""
Server actions: one module per content type.

Every action takes the `Services` container first, validates its input,
performs a single store call (or one atomic batch) and invalidates the cached
pages that display the content.
"""
