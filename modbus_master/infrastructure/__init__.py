"""Infrastructure layer: protocol codec, TCP transport and transaction execution."""
