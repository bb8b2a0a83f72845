"""
Invoices: frozen snapshots of an order's totals.
"""
