"""Lava Rápido backoffice: expense ledger, wash queue and monthly reports."""
