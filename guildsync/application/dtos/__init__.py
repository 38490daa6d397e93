"""Application DTOs (frozen dataclasses; no ORM imports)."""
