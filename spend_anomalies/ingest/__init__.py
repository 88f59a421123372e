"""Loading transactions from exported statement files."""

from .utils import load_transactions

__all__ = ["load_transactions"]
