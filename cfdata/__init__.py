"""Generate and tear down tagged sample content in Contentful."""

__version__ = "0.1.0"
