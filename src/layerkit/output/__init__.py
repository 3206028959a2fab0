"""Output layer — render LayerResults for humans (Rich) or machines (JSON)."""
