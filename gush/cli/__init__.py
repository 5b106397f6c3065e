# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Gush CLI

Usage:
    gush pr create                # Open a pull request from the active branch
    gush pr switch-base 12 main   # Retarget a pull request
    gush release list             # View releases
"""

from .main import cli

__all__ = ['cli']
