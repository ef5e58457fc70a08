"""
Shared infrastructure for the RechargeEarn client.

This package contains cross-cutting concerns used by every module:
- config: Centralized settings management
- http: Backend API client (envelope, bearer token, 401 teardown)
- storage: Durable key-value store
- navigation: Routes and external redirects
- fsm / flow: State machine and flow controller base
- exceptions: Base exception classes

Note: Business logic should NOT go here. This is for infrastructure only.
"""
