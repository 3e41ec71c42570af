"""Terminal building blocks for fuzzy finders: text widths, events, colours and rendering."""

__version__ = "0.1.0"