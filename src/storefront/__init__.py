"""Storefront — catalogue, cart and order lifecycle for an online shop."""
