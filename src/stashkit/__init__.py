"""Create, store, apply and discard git stash snapshots."""
