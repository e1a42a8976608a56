"""
Backend package for the Cosmic event-planning site.

This package provides a FastAPI application that renders the site pages,
stores contact and dashboard submissions in JSON array files and keeps
event-planning requests in a document collection.
"""
