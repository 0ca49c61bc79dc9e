from zento.domains.finance.services.category_service import (
    create_category,
    delete_category,
    list_categories,
    reorder_categories,
    update_category,
)
from zento.domains.finance.services.payment_source_service import (
    create_payment_source,
    delete_payment_source,
    list_payment_sources,
    set_default_payment_source,
)
from zento.domains.finance.services.transaction_service import (
    create_transaction,
    list_transactions,
    update_transaction,
)

__all__ = [
    "create_category",
    "create_payment_source",
    "create_transaction",
    "delete_category",
    "delete_payment_source",
    "list_categories",
    "list_payment_sources",
    "list_transactions",
    "reorder_categories",
    "set_default_payment_source",
    "update_category",
    "update_transaction",
]
