"""Analytics app package: facility usage statistics for admins and members."""
