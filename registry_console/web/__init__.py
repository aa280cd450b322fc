"""Web shell for the console.

This package contains the route guard, the form orchestrators, the
dependency wiring and the JSON views served by the local console.
"""
