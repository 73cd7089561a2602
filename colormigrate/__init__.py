"""colormigrate - safe, reversible migration of static colour constants to theme lookups."""

__version__ = "1.0.0"
