"""
Utilities module: Exceptions, money helpers, schemas.
"""
