"""Product catalogue: products, stock counters and reviews."""
