"""HTTP access to the task service: authenticated gateway and /auth client."""
