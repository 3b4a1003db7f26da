"""Ports (Protocols) implemented by the infrastructure layer."""
