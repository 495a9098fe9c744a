"""DealDocs - deal-scoped document transfer and registry service"""

__version__ = "0.1.0"
