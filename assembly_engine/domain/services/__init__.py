"""Pure domain services: deterministic governance rules with no I/O."""
