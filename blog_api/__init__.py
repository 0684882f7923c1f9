"""
Blog API: read-only JSON endpoints over a relational blog store.
"""

__version__ = "0.1.0"
