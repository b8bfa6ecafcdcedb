"""Tool argument records, dispatcher and text rendering."""
