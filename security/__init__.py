"""
Security module - Abuse detection.

This module handles:
- SecurityEvent entity and store
- Per-IP rate limiting of invalid-key probing
- Classified security signals and their human resolution
"""
