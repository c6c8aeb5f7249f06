"""Room domain services: board generation, room codes and the room store.

This package holds the in-memory room state and the rules that mutate it.
It knows nothing about Flask or Socket.IO, so handlers and HTTP routes
share one implementation and tests can build isolated stores.
"""
