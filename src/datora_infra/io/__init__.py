"""I/O layer: outbound connectors."""
