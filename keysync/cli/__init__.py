"""keysync command line interface."""
