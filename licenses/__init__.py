"""
Licenses module - License key issuance and lifecycle.

This module handles:
- LicenseKey entity, key generation and the status state machine
- License store (conditional updates on the key row)
- Administrative lifecycle (issue, activate, revoke, update, reissue)
- Client status reports
- Expiration sweep and purge of old expired keys
"""
