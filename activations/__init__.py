"""
Activations module - License validation and activation admission.

This module handles:
- ActivationAttempt audit log
- Activation admission (status gate, hardware binding, capacity)
- The client-facing validate operation
"""
