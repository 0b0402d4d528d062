"""Year-based configuration for the salary income deduction tables."""
