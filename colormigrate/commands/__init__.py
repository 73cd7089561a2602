"""Commands module for colormigrate CLI."""
