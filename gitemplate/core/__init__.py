"""Core substitution engine, shell wrapper and pipeline."""
