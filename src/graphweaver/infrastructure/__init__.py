"""Infrastructure: provider adapters and settings loading."""
