"""Infrastructure layer - adapters for application ports and observability."""
