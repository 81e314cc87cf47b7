"""campaign-agent: routes marketing requests to idea and concept generation."""

__version__ = "0.1.0"
