"""
Postboard - a small content-management backend.

Authenticated users create, update, delete and search short text posts,
each of which may carry one attached file.
"""

__version__ = "0.1.0"
