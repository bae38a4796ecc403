"""Domain layer for pocketledger application."""

__all__ = [
    "AccountService",
    "LedgerService",
    "OpeningService",
    "TransferService",
    "AdjustmentService",
    "PostingService",
    "CategoryService",
]

_SERVICE_MODULES = {
    "AccountService": "pocketledger.domain.account",
    "LedgerService": "pocketledger.domain.ledger",
    "OpeningService": "pocketledger.domain.opening",
    "TransferService": "pocketledger.domain.transfer",
    "AdjustmentService": "pocketledger.domain.adjustment",
    "PostingService": "pocketledger.domain.posting",
    "CategoryService": "pocketledger.domain.category",
}


# Services import the database layer, which imports domain.entities, so load them lazily
def __getattr__(name):
    if name in _SERVICE_MODULES:
        from importlib import import_module

        return getattr(import_module(_SERVICE_MODULES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
