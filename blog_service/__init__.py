"""Blog service: posts, comments, tags, categories and likes over a REST API."""

__version__ = "1.0.0"
