# Services package init
"""
Blog Backend: Services Layer
==============================

What:  Data access sitting between routes (HTTP) and the database.
Why:   Routes handle HTTP; services run queries and classify failures.

Service Inventory:
    - PostService: recent posts and single post lookup
"""
