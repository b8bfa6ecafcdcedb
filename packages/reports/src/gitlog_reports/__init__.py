"""Report persistence for gitlogmcp analyses."""
