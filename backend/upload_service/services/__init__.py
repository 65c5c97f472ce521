"""
Services
========
"""
