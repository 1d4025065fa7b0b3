"""Core building blocks: signatures, filesystem access, configuration."""
