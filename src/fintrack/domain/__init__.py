"""Domain layer for fintrack application.

Services are imported lazily: the database layer imports
``fintrack.domain.entities`` while the services import the database layer.
"""

_SERVICES = {
    "AccountService": "fintrack.domain.account",
    "CardService": "fintrack.domain.card",
    "CategorizationEngine": "fintrack.domain.categorization",
    "CategoryService": "fintrack.domain.category",
    "ImportService": "fintrack.domain.import_service",
    "InstallmentService": "fintrack.domain.installments",
    "LedgerService": "fintrack.domain.ledger",
    "MappingService": "fintrack.domain.mapping",
    "TagService": "fintrack.domain.tag",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
