"""
HTTP layer.

``router`` aggregates the domain routers under a common prefix; each
domain exposes its own ``router`` in ``api/endpoints``.
"""
