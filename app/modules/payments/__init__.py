"""
Payments against orders. Cash payments move the open register's balance.
"""
