"""Data package for the transactions API client and its models."""

from .models import ApiResult, EnrichmentItem, TransactionQuery, TransactionRecord
from .transactions_fetcher import TransactionsFetcher

__all__ = ['ApiResult', 'EnrichmentItem', 'TransactionQuery', 'TransactionRecord', 'TransactionsFetcher']
