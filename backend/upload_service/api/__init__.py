"""
API
===
HTTP boundary.
"""
