"""Linear webhook verification, processing and HTTP transport."""
