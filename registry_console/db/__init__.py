"""Local persistence for the console (the token store)."""
