"""vbump - resolve current artifact versions from declarative version specs."""

__version__ = "0.3.0"
