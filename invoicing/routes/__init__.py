"""
FastAPI routers for all API endpoints.

Each module defines a router for one area (auth, settings, invoices).
Every route except /health, /api/auth/verify and (by default) the logo
read is gated by the x-app-session header.
"""
