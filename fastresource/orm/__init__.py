# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from edgy import (
    Database,
    Registry,
    Model,
)
from fastresource.orm import fields
from fastresource.orm.transaction import atomic, enable_sqlite_transactions, in_transaction, transaction


__all__ = [
    "Database",
    "Registry",
    "Model",
    "fields",
    "atomic",
    "enable_sqlite_transactions",
    "in_transaction",
    "transaction",
]
