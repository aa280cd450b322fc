"""Core session, token and reference-data components.

Everything in this package is usable without the web shell.
"""
