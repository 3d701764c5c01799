"""External services used by the Firebase middleware."""
