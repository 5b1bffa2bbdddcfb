"""HTTP layer of the relay: the /mapping routes and the registration schemas.

The service clients import app.api.schemas, so this package must not import
its submodules eagerly.
- api package
"""

__all__ = ["routes", "schemas"]
