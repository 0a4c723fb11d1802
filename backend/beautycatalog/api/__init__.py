"""HTTP API support: dependency providers."""
