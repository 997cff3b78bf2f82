"""HTTP surface of the storefront: routers, auth dependencies and error envelope."""
