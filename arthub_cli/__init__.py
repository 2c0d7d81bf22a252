"""arthub command-line interface."""
from arthub import __version__

__all__ = ["__version__"]
