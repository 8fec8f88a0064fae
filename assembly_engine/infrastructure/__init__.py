"""Infrastructure layer: storage adapters, sinks, stubs and observability."""
