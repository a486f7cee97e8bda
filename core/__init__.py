"""
Core module for shared domain infrastructure.

This module contains:
- Domain events, exceptions, value objects and the clock port
- Event bus and notification delivery
- Middleware components
- Scheduled tasks and management commands
"""
