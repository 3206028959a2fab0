"""Domain layer — declarations, binding, observers, and callback routing.

This layer depends only on stdlib and pydantic.
It must never import from services, plugins, commands, or config.
"""
