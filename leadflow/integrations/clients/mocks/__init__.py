"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- FieldRoutes / Payrix sandbox credentials are not available
- We want to test the lead flow end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients return bodies shaped like the real upstream APIs.

Switching to real:
Set INTEGRATIONS_MODE=real (the default) and provide credentials; the selection
happens in leadflow/api/dependencies.py.
"""

from .crm import MockFieldRoutesClient
from .payments import MockPayrixClient

__all__ = ["MockFieldRoutesClient", "MockPayrixClient"]
