"""Top-level gitpromote commands (auto-discovered)."""
