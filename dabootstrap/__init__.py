"""
dabootstrap — one-shot host bootstrap for a DirectAdmin partner install.
"""

__version__ = "0.1.0"
