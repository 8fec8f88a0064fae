"""Application layer: ports and governance use cases."""
