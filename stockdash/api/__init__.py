"""HTTP API exposing the inventory manager."""
