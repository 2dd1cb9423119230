"""
Cyclone Viewer API Module

FastAPI application and the in-memory track file manager.
"""
