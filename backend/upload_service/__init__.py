"""
Object Upload Service
=====================
Titled file uploads to local disk or an S3-compatible bucket.
"""

__version__ = "1.0.0"
