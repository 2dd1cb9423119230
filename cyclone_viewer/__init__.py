"""
Cyclone Viewer

Backend for visualizing and editing tropical-cyclone track data.
"""

__version__ = "1.0.0"
