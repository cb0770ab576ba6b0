"""
FastAPI routers for all API endpoints.

Each module defines a router for one area (search, results view, health).
"""
