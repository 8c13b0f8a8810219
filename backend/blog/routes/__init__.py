# Routes package init
"""
Blog Backend: Routes Package
==============================

Route Inventory:
    - pages.py:   GET /, /blog, /blog/{slug}, /hireme   (HTML)
    - health.py:  GET /health                            (JSON)

Design Principle:
    Routes handle HTTP concerns only. They call PostService for data and
    render_page for markup, and translate failures into ServerError kinds.
"""
