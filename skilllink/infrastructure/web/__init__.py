"""
HTTP layer: FastAPI routers and middleware.
"""
