"""Command-line tools for the staking-rewards pool."""
