"""Student academic & scholarship advisor API."""
