"""Domain layer for ledgerbook.

Services are imported from their modules, e.g.
``from ledgerbook.domain.ledger import LedgerEngine``.
"""
