"""Single source of truth for the naws version string."""

__version__: str = "0.1.0"
