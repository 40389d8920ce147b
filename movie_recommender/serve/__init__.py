"""HTTP serving layer (Flask)."""
