"""Application layer: ports and the use cases built on top of them."""
