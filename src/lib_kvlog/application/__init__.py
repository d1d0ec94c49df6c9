"""Application layer: ports implemented by adapters."""
