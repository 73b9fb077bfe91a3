"""
Core module - configuration, logging, errors, tokens and the authorization guard.
"""
