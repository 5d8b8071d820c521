"""Language server for SQL client scripts."""
