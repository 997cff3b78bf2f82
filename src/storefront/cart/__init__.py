"""Per-customer shopping cart."""
