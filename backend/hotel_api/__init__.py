"""Hotel search and booking backend."""
