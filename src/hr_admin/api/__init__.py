"""HTTP API for the HR admin engine."""
