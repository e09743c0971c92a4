"""
Core infrastructure: logging, exceptions and HTTP middleware.
"""
