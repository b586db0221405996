"""runtpl: render text templates with variables, loops and file listings."""

__version__ = "0.3.0"
