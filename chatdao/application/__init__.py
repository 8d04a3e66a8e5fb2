"""Application layer - async services orchestrating the governance core."""
