"""
Application layer.

Service facades that wire core components for callers.
"""
