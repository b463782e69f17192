# html_scout/__init__.py
"""
HtmlScout package initializer.
Defines the package version; the CLI lives in :mod:`html_scout.cli`.
"""
__version__ = "0.1.0"

__all__ = ["__version__"]
