"""Action reconciliation core: naming, labels, credentials, builders and reconciler."""
