"""Core: configuration, domain models and the build pipeline."""
