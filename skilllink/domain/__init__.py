"""
Domain layer: entities, value objects, events, repository interfaces and services.
"""
