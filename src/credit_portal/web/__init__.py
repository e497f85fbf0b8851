"""Web API for the credit portal."""
