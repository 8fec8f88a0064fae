"""Domain layer: pure governance rules, models and errors.

Nothing in this package imports from the application or infrastructure
layers.
"""
