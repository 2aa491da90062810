"""API routers for Panelsmith."""
