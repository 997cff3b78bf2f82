"""Order lifecycle: checkout, status transitions, stock reconciliation, returns."""
