"""Reconcile Power BI workspaces and their capacity assignment."""
