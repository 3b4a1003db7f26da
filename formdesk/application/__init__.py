"""Application layer: DTOs, ports, authorization guard and lifecycle services."""
