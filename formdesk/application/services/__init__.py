"""Application services: authorization guard, field normaliser, auth and user administration."""
