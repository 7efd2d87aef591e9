"""Metadata for optscope package."""

from __future__ import annotations

__title__ = "optscope"
__package_name__ = "optscope"
__version__ = "0.1.0"
__description__ = "Scoped option access for editor windows and buffers"
__email__ = "maintainers@optscope.dev"
__author__ = "optscope contributors"
__github__ = "https://github.com/optscope/optscope"
__docs__ = "https://optscope.readthedocs.io"
__tracker__ = "https://github.com/optscope/optscope/issues"
__pypi__ = "https://pypi.org/project/optscope/"
__license__ = "MIT"
__copyright__ = "Copyright 2026- optscope contributors"
