"""aliasctl - cross-platform shell alias manager"""

__version__ = "0.4.0"
