"""Configuration, persistence, security and response helpers."""
