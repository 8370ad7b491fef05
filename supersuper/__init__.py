"""SuperSuper pantry tracking service."""
