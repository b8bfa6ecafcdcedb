"""gitlogmcp subcommands."""
