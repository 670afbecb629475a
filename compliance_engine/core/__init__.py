"""Core infrastructure: configuration, logging, ontology and visualization."""
