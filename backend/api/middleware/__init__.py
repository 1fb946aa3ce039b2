"""Request-level auth dependencies and middleware."""
