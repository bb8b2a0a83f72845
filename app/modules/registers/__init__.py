"""
Cash register ("caisse")

- models.py: RegisterSession and LedgerEntry
- service.py: session lifecycle and deposits/withdrawals
- router.py: /caisse and /transactions endpoints
- tasks.py: Celery beat jobs opening and closing the register daily
- tests.py: unit and API tests
"""
