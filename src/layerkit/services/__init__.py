"""Service layer — the Layer base class and outcome recording.

Services may import from the domain layer.
They must never import from commands, output, or plugins.
"""
