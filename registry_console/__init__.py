"""Registry Console: session and orchestration client for the land registry service"""

__version__ = "1.0.0"
