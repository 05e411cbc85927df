"""Persistence: key-value storage, level and history stores, external clients."""
