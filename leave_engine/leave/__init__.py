"""Leave module — entitlement, accrual, carry-over, balances, reconciliation."""
