"""
Folio CMS backend: portfolio data API, page rendering and edge functions
"""
__version__ = "0.1.0"
