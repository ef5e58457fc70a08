"""
Feature modules for the RechargeEarn client.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the backend endpoints it uses
- models.py: Pydantic models for wire data and forms
- service.py: Endpoint implementation on top of shared.http.ApiClient
- flows.py: Page-level state machines

Modules communicate through interfaces, not concrete implementations.
"""
