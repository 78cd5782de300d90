"""
Repeat Landscape

Per-bin repeat-element length, count and GC content profiles across a genome.
"""

__version__ = "1.0.0"
__author__ = "Bioinformatics Team"
__email__ = "team@example.com"

# Lazy imports to avoid dependency issues
def get_pipeline():
    """Get the LandscapePipeline class."""
    from .core.pipeline import LandscapePipeline
    return LandscapePipeline

def get_landscape_config():
    """Get the LandscapeConfig class."""
    from .config.settings import LandscapeConfig
    return LandscapeConfig

def get_landscape_result():
    """Get the LandscapeResult class."""
    from .core.pipeline import LandscapeResult
    return LandscapeResult

__all__ = ["get_pipeline", "get_landscape_config", "get_landscape_result"]
