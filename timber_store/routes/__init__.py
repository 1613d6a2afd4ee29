"""HTTP blueprints; all responses are JSON."""
