"""Application entry point."""
