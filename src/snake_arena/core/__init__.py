"""Core primitives: configuration, errors and the pure replay/cadence algorithms."""
