"""Version information for the ossign SDK"""

__version__ = "0.1.0"
