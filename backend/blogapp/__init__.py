# backend/blogapp/__init__.py
"""
Writing Journey backend application package.

This package contains:
- main: FastAPI application entrypoint
- notion: Notion integration (client, normalizer, post service, /api/posts)
- graph: contribution graph (grid builder, page, viewer state, CLI)
"""
