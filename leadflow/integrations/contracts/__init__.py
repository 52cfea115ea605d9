"""
Contracts (data models).

This folder defines the request/response shapes used across the lead flow:
- raw form submissions and the canonical contact built from them
- detected payment fragments
- the aggregated submission result
- the client interfaces for the CRM and the payment processor

Both mock and real HTTP clients implement the interfaces defined here.
"""
