"""Storage and identifier services."""
