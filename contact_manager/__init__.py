"""Personal contact manager with BRL salaries mirrored into USD and EUR."""

__version__ = "0.1.0"
