"""Data models for media descriptors, encoding settings and plans."""
