"""stemsplit command line interface."""
