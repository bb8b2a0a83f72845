"""
Orders

- calculator.py: pure totals / remaining due / paid status
- service.py: order CRUD and paid status
- router.py: /commandes endpoints
"""
