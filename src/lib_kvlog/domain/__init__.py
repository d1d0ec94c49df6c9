"""Domain layer: the logger value object, its formatting rules and errors."""
