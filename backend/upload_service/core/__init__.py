"""
Core
====
Configuration, logging and exceptions.
"""
