"""Design-system drift scanning: Figma API access layer."""

__version__ = "0.1.0"
