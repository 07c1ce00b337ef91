"""
API routers, mounted under the API prefix by ``skilllink.main``.
"""
