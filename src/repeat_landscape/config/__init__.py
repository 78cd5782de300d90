"""
Configuration management for the repeat landscape pipeline.
"""

# Lazy import to avoid dependency issues
def get_landscape_config():
    """Get the LandscapeConfig class."""
    from .settings import LandscapeConfig
    return LandscapeConfig

__all__ = ["get_landscape_config"]
