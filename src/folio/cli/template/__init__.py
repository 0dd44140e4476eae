"""Template compilation and rendering commands."""
