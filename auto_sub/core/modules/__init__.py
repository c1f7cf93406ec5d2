"""Building blocks used by the auto_sub entry point."""
