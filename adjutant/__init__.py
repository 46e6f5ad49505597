"""Adjutant -- product idea to blueprint, scaffold and generated code."""

from adjutant.config import VERSION as __version__

__all__ = ["__version__"]
