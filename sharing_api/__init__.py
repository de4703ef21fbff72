"""Resource Sharing API."""
