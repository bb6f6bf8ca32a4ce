"""
Repository modules for database access.

``gravity`` holds the store operations behind the list API; the service
layer in ``core.services`` is the only caller.
"""
