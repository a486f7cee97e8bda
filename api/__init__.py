"""
API module - REST adapters over the application handlers.

This module handles:
- Client-facing license validation and status reports
- Admin license, security and maintenance endpoints
- Mapping domain exceptions to HTTP error responses
"""
