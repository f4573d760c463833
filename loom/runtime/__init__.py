"""
Runtime support for generated units.
"""

from .output import TemplateOutputWriter

__all__ = ["TemplateOutputWriter"]
