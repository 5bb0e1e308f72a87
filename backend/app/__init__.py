"""
This is the main package for the document converter backend.

It contains subpackages for:
- api: API endpoints and request handling
- core: configuration and exceptions
- models: data models
- services: analysis clients, blob download and the conversion dispatcher
- utils: extractors, text building and construction heuristics
"""

__version__ = "1.0.0"
