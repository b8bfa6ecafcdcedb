"""Pure input checks and filesystem guards."""
