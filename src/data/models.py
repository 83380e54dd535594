"""Request and response models for the Account Transactions API."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from ..errors import QueryValidationError
from ..reason_codes import normalize_reason_code

logger = logging.getLogger(__name__)

MAX_DATE_RANGE = timedelta(days=30)
MAX_PAGE_SIZE = 500

# Wire key for every TransactionQuery field, in the order the API documents them
_QUERY_WIRE_KEYS = (
    ('consent_id', 'consentId'),
    ('unit_num', 'unitNum'),
    ('account_num', 'accountNum'),
    ('iban', 'IBAN'),
    ('start_date', 'startDate'),
    ('end_date', 'endDate'),
    ('transaction_id', 'transactionId'),
    ('page_index', 'pageIndex'),
    ('page_size', 'pageSize'),
)


def _parse_date(value: str, name: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise QueryValidationError(f"{name} '{value}' is not an ISO date/time", reason_code=21)


@dataclass(frozen=True)
class TransactionQuery:
    """One page request against the gettransactions endpoint."""
    consent_id: str
    unit_num: str
    account_num: str
    iban: str
    start_date: str
    end_date: str
    transaction_id: str = ''
    page_index: int = 1
    page_size: int = 100

    def to_wire(self) -> Dict[str, Any]:
        """Request body with the exact field names the API expects."""
        return {wire: getattr(self, attr) for attr, wire in _QUERY_WIRE_KEYS}

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> 'TransactionQuery':
        kwargs = {attr: data[wire] for attr, wire in _QUERY_WIRE_KEYS if wire in data}
        return cls(**kwargs)

    def validate(self) -> None:
        """
        Check the query against the rules the remote service enforces.

        Raises:
            QueryValidationError: carrying the reason code the API would answer with.
        """
        if not self.consent_id:
            raise QueryValidationError('consentId is required', reason_code=2)
        if bool(self.unit_num) != bool(self.account_num):
            raise QueryValidationError('unitNum and accountNum must be sent together', reason_code=5)

        start = _parse_date(self.start_date, 'startDate')
        end = _parse_date(self.end_date, 'endDate')
        if (start.tzinfo is None) != (end.tzinfo is None):
            raise QueryValidationError('startDate and endDate must both carry a UTC offset or neither', reason_code=21)
        if end < start:
            raise QueryValidationError('endDate is before startDate', reason_code=19)
        if end - start > MAX_DATE_RANGE:
            raise QueryValidationError(
                f"Date range {self.start_date} - {self.end_date} exceeds 30 days", reason_code=18
            )

        if not all(isinstance(v, int) and not isinstance(v, bool) for v in (self.page_index, self.page_size)):
            raise QueryValidationError('pageIndex and pageSize must be integers')
        if self.page_index < 1 or self.page_size < 1:
            raise QueryValidationError('pageIndex and pageSize must be positive')
        if self.page_size > MAX_PAGE_SIZE:
            raise QueryValidationError(f"pageSize {self.page_size} exceeds {MAX_PAGE_SIZE}", reason_code=30)


@dataclass(frozen=True)
class EnrichmentItem:
    code: str
    value: str


@dataclass(frozen=True)
class TransactionRecord:
    """A single account movement as returned by the API."""
    customer_name: str = ''
    activity_date: str = ''
    value_date: str = ''
    amount: str = ''
    currency_code: Optional[str] = None
    credit_debit_indicator: str = ''
    explanation: str = ''
    balance_after_transaction: str = ''
    transaction_id: str = ''
    classification_code: Optional[str] = None
    enrichment_information: Tuple[EnrichmentItem, ...] = ()

    @property
    def is_credit(self) -> bool:
        return self.credit_debit_indicator == 'A'

    @property
    def direction(self) -> str:
        return 'Credit' if self.is_credit else 'Debit'

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'TransactionRecord':
        enrichment = tuple(
            EnrichmentItem(code=str(item.get('code', '')), value=str(item.get('value', '')))
            for item in data.get('enrichmentInformation') or []
            if isinstance(item, dict)
        )
        # Amounts stay strings so the API's own formatting is shown as-is
        return cls(
            customer_name=data.get('customerName') or '',
            activity_date=data.get('activityDate') or '',
            value_date=data.get('valueDate') or '',
            amount=str(data.get('amount', '')),
            currency_code=data.get('currencyCode'),
            credit_debit_indicator=data.get('txnCreditDebitIndicator') or '',
            explanation=data.get('explanation') or '',
            balance_after_transaction=str(data.get('balanceAfterTransaction', '')),
            transaction_id=data.get('transactionId') or '',
            classification_code=data.get('classificationCode'),
            enrichment_information=enrichment,
        )


@dataclass(frozen=True)
class ApiResult:
    """Parsed body of a successful gettransactions call."""
    return_code: Optional[str] = None
    reason_code: Optional[int] = None
    message_text: Optional[str] = None
    transactions: Tuple[TransactionRecord, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def has_result(self) -> bool:
        result = self.raw.get('result')
        return isinstance(result, dict) and bool(result)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'ApiResult':
        result = data.get('result')
        if not isinstance(result, dict):
            result = {}
        items = data.get('transactions')
        if not isinstance(items, list):
            items = []
        transactions = tuple(
            TransactionRecord.from_api(tx)
            for tx in items
            if isinstance(tx, dict)
        )
        logger.debug(f"Parsed {len(transactions)} transactions from API response")
        return_code = result.get('returnCode')
        return cls(
            return_code=str(return_code) if return_code is not None else None,
            reason_code=normalize_reason_code(result.get('reasonCode')),
            message_text=result.get('messageText'),
            transactions=transactions,
            raw=data,
        )
