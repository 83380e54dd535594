"""Console display module for rendering API results and failures to the terminal."""

import json
import logging
from typing import List

from ..data.models import ApiResult, TransactionRecord
from ..errors import ApiError, AuthError, GarantiApiError
from ..reason_codes import ErrorCategory
from .diagnostics import diagnose, next_steps

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = 'TL'


class ConsoleDisplay:
    """Renders transaction results and error analysis as console text."""

    def __init__(self, use_colors: bool = True, show_enrichment: bool = False):
        self.use_colors = use_colors
        self.show_enrichment = show_enrichment
        self._setup_colors()

    def _setup_colors(self) -> None:
        if self.use_colors:
            self.colors = {
                'reset': '\033[0m',
                'bold': '\033[1m',
                'green': '\033[92m',
                'red': '\033[91m',
                'yellow': '\033[93m',
                'blue': '\033[94m',
                'cyan': '\033[96m',
                'gray': '\033[90m',
            }
        else:
            self.colors = {k: '' for k in ['reset', 'bold', 'green', 'red', 'yellow', 'blue', 'cyan', 'gray']}

    def _paint(self, color: str, text: str) -> str:
        return f"{self.colors[color]}{text}{self.colors['reset']}"

    # ------------------------------------------------------------------
    # Rendering (pure)
    # ------------------------------------------------------------------

    def render_banner(self, environment: str, offline: bool = False) -> str:
        target = 'LOCAL OFFLINE SANDBOX' if offline else 'DEVELOPMENT SANDBOX SERVICE'
        lines = [
            self._paint('bold', '🚀 Testing Garanti BBVA Account Transactions API'),
            f"📋 Environment: {environment} ({target})",
            '⚠️  Note: Using a fresh token for each call (single-use requirement)',
        ]
        return '\n'.join(lines)

    def render_result(self, result: ApiResult) -> str:
        lines = [self._paint('green', '🎉 SUCCESS! API Response:'), '=' * 50]

        if result.has_result:
            lines.append(f"📊 Return Code: {result.return_code}")
            lines.append(f"📊 Reason Code: {result.reason_code}")
            lines.append(f"📊 Message: {result.message_text}")

        if result.transactions:
            lines.append('')
            lines.append(self._paint('bold', f"💰 Found {len(result.transactions)} transactions:"))
            lines.append('')
            for index, transaction in enumerate(result.transactions, 1):
                lines.extend(self._render_transaction(index, transaction))
        else:
            lines.append('')
            lines.append(self._paint('yellow', '📋 No transactions found (might be expected for test data)'))
        return '\n'.join(lines)

    def _render_transaction(self, index: int, tx: TransactionRecord) -> List[str]:
        amount_color = 'green' if tx.is_credit else 'red'
        amount = f"{tx.amount} {tx.currency_code or DEFAULT_CURRENCY}"
        value_date = f" (Value: {tx.value_date})" if tx.value_date else ''
        lines = [
            f"Transaction {index}:",
            f"  👤 Customer: {tx.customer_name}",
            f"  📅 Date: {tx.activity_date}{value_date}",
            f"  💵 Amount: {self._paint(amount_color, amount)}",
            f"  📈 Type: {tx.direction}",
            f"  📝 Description: {tx.explanation}",
            f"  💰 Balance: {tx.balance_after_transaction}",
            f"  🔖 Transaction ID: {tx.transaction_id}",
        ]
        if tx.classification_code:
            lines.append(f"  🏷️  Classification: {tx.classification_code}")
        if self.show_enrichment and tx.enrichment_information:
            lines.append('  ℹ️  Enrichment:')
            for item in tx.enrichment_information:
                lines.append(f"     - {item.code}: {item.value}")
        lines.append('  ---')
        return lines

    def render_error_analysis(self, error: BaseException) -> str:
        """Per-status explanation of a failed call."""
        lines = [self._paint('bold', '🔍 Error Analysis:')]

        if isinstance(error, AuthError):
            status = f"HTTP {error.status}" if error.status else 'no request sent'
            lines.append(f"🚫 Token request rejected ({status}): {error.error}")
            if error.description:
                lines.append(f"💡 {error.description}")
            return '\n'.join(lines)

        if not isinstance(error, ApiError):
            reason = getattr(error, 'reason_code', None)
            suffix = f" - Reason Code {reason}" if reason is not None else ''
            lines.append(f"🚫 {type(error).__name__}{suffix}: {error}")
            return '\n'.join(lines)

        category = error.category
        if category is ErrorCategory.BAD_REQUEST:
            lines.append(f"🚫 400 Bad Request - Reason Code {error.reason_code}")
            if error.reason_message:
                lines.append(f"💡 {error.reason_message}")
        elif category is ErrorCategory.UNAUTHORIZED:
            lines.append('🚫 401 Unauthorized - Authentication failed')
            lines.append('💡 Possible causes:')
            lines.append('   • OAuth credentials invalid or inactive')
            lines.append('   • Application not approved for API access')
            lines.append('   • Consent ID invalid for your account')
            lines.append('   • Access token expired or already used (single-use requirement)')
        elif category is ErrorCategory.FORBIDDEN:
            lines.append('🚫 403 Forbidden - Access denied')
            lines.append('💡 Your application may not have permission for this API')
        elif category is ErrorCategory.RATE_LIMITED:
            lines.append('🚫 429 Rate Limit - Too many requests')
            lines.append('💡 Wait before making additional requests')
        elif category is ErrorCategory.SERVER_ERROR:
            lines.append('🚫 500 Internal Server Error - Server-side issue')
            lines.append('💡 This is likely a temporary server problem')
        else:
            lines.append(f"🚫 HTTP {error.http_status} - Unexpected error")
        if error.message_text:
            lines.append(f"📄 Message: {error.message_text}")
        return '\n'.join(lines)

    def render_failure(self, error: BaseException) -> str:
        """Failure summary, diagnosis and next steps."""
        lines = [
            self._paint('red', f"💥 Test failed: {error}"),
            '',
            self.render_error_analysis(error),
            '',
            f"🩺 Diagnosis: {diagnose(error).value}",
            '',
            self._paint('bold', '🔧 Next Steps:'),
        ]
        lines.extend(f"{i}. {step}" for i, step in enumerate(next_steps(error), 1))
        if isinstance(error, ApiError) and not isinstance(error.body, str) and error.body:
            lines.append('')
            lines.append(self._paint('gray', f"Response: {json.dumps(error.body, indent=2, ensure_ascii=False)}"))
        return '\n'.join(lines)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def show_banner(self, environment: str, offline: bool = False) -> None:
        print(self.render_banner(environment, offline))
        print()

    def show_result(self, result: ApiResult) -> None:
        print(self.render_result(result))
        print(f"\n{self._paint('green', '✅ Test completed successfully!')}")

    def show_failure(self, error: BaseException) -> None:
        print()
        print(self.render_failure(error))


def format_result(result: ApiResult, show_enrichment: bool = False) -> str:
    """Plain-text rendering of a successful API result."""
    return ConsoleDisplay(use_colors=False, show_enrichment=show_enrichment).render_result(result)


def format_failure(error: BaseException) -> str:
    """Plain-text rendering of a failure, its diagnosis and next steps."""
    if not isinstance(error, GarantiApiError):
        logger.debug(f"Formatting unexpected error type {type(error).__name__}")
    return ConsoleDisplay(use_colors=False).render_failure(error)
