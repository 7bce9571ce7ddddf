"""Ledger service: the single owner of transactions, budgets and settings."""

import json
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError as RecordError

from db.store import BUDGETS_KEY, LEDGER_KEYS, SETTINGS_KEY, TRANSACTIONS_KEY
from errors import NotFoundError, SerializationError, ValidationError
from ingestion import json_format
from logger import get_logger
from models.budget import Budget
from models.currency import SUPPORTED_CURRENCIES
from models.records import SettingsRecord
from models.settings import THEMES, Settings
from models.transaction import TRANSACTION_TYPES, Transaction, new_id
from tools.query import unique_categories

logger = get_logger("ledger")

Listener = Callable[[str, object], None]

_SETTING_FLAGS = ("auto_save", "budget_alerts", "monthly_summary")


def to_amount(value) -> Decimal:
    """Convert value to a positive, finite Decimal.

    Raises:
        ValidationError: If value is missing, not a number, not finite, or not positive.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Amount is required")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Amount must be a finite number: {value}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"Amount must be a number: {value!r}")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"Amount must be a positive number: {value}")
    return amount


def to_date(value) -> date:
    """Convert an ISO date string (or date) to a date.

    Raises:
        ValidationError: If value is missing or not a valid calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError("Date is required")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}")


def _required_text(value, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


class LedgerService:
    """Owns the authoritative transaction and budget lists plus settings.

    Every successful mutation bumps `revision` (so derived views know to
    recompute), notifies subscribers, and persists to the store when
    auto-save is enabled.

    Args:
        store: Key-value store holding the serialized records.
        default_currency: Currency used when no settings are stored yet.
    """

    def __init__(self, store, default_currency: str = "USD"):
        self.store = store
        self.transactions: List[Transaction] = []
        self.budgets: List[Budget] = []
        self.settings = Settings(currency=default_currency)
        self.revision = 0
        self._listeners: List[Listener] = []

    # -- persistence -------------------------------------------------------

    def load(self) -> None:
        """Load all records from the store.

        A missing or corrupt record falls back to its default (empty list or
        default settings) and is logged; loading never raises.
        """
        self.transactions = self._load_list(
            TRANSACTIONS_KEY, json_format.parse_transactions
        )
        self.budgets = self._dedupe_budgets(
            self._load_list(BUDGETS_KEY, json_format.parse_budgets)
        )
        self.settings = self._load_settings()
        self.revision += 1

        logger.debug(
            f"Loaded {len(self.transactions)} transactions, "
            f"{len(self.budgets)} budgets, currency {self.settings.currency}"
        )

    def _load_list(self, key: str, parse):
        raw = self.store.get(key)
        if raw is None:
            return []
        try:
            return parse(raw)
        except SerializationError as e:
            logger.error(f"Error loading {key}, starting empty: {e}")
            return []

    def _load_settings(self) -> Settings:
        defaults = Settings(currency=self.settings.currency)
        raw = self.store.get(SETTINGS_KEY)
        if raw is None:
            return defaults
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise SerializationError("settings must be a JSON object")
            merged = {**defaults.to_dict(), **data}
            return SettingsRecord.model_validate(merged).to_settings()
        except (json.JSONDecodeError, SerializationError, RecordError) as e:
            logger.error(f"Error loading settings, using defaults: {e}")
            return defaults

    @staticmethod
    def _dedupe_budgets(budgets: List[Budget]) -> List[Budget]:
        # Keep one budget per category; a later record wins
        by_category: Dict[str, Budget] = {}
        for budget in budgets:
            by_category[budget.category] = budget
        return list(by_category.values())

    def save(self, force: bool = False) -> bool:
        """Write all records to the store.

        Args:
            force: Save even when auto-save is disabled.

        Returns:
            True if the records were written, False if skipped or failed.
        """
        if not (force or self.settings.auto_save):
            return False
        try:
            self.store.set(
                TRANSACTIONS_KEY,
                json_format.dump_transactions(self.transactions, indent=None),
            )
            self.store.set(
                BUDGETS_KEY, json_format.dump_budgets(self.budgets, indent=None)
            )
            self._save_settings()
        except OSError as e:
            logger.error(f"Error saving data: {e}")
            return False
        return True

    def _save_settings(self) -> None:
        self.store.set(SETTINGS_KEY, json.dumps(self.settings.to_dict()))

    def _commit(self, event: str, payload=None) -> None:
        self.revision += 1
        self.save()
        for listener in list(self._listeners):
            listener(event, payload)

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked as listener(event, payload) after each mutation."""
        self._listeners.append(listener)

    # -- transactions ------------------------------------------------------

    def _validate_transaction(self, transaction: Transaction) -> Transaction:
        if transaction.type not in TRANSACTION_TYPES:
            raise ValidationError(f"Invalid transaction type: {transaction.type!r}")
        transaction.date = to_date(transaction.date)
        transaction.description = _required_text(transaction.description, "Description")
        transaction.category = _required_text(transaction.category, "Category")
        transaction.amount = to_amount(transaction.amount)
        transaction.payment_method = (transaction.payment_method or "cash").strip() or "cash"
        if not transaction.id:
            transaction.id = new_id()
        return transaction

    def add_transaction(self, transaction: Transaction) -> Transaction:
        """Validate and append a transaction.

        Args:
            transaction: Transaction to add.

        Returns:
            The stored transaction.

        Raises:
            ValidationError: If a required field is missing or invalid, or the
                id is already in use.
        """
        transaction = self._validate_transaction(transaction)
        if self.find_transaction(transaction.id) is not None:
            raise ValidationError(f"Duplicate transaction id: {transaction.id}")

        self.transactions.append(transaction)
        logger.debug(f"Added {transaction.type} {transaction.id[:8]} {transaction.amount}")
        self._commit("transaction_added", transaction)
        return transaction

    def record(
        self,
        type: str,
        date_value,
        description: str,
        category: str,
        amount,
        payment_method: str = "cash",
    ) -> Transaction:
        """Build and add a transaction from raw field values."""
        return self.add_transaction(
            Transaction.create(
                type=type,
                date=date_value,
                description=description,
                category=category,
                amount=amount,
                payment_method=payment_method,
            )
        )

    def delete_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction by id.

        Returns:
            True if deleted, False if no such transaction exists.
        """
        for index, t in enumerate(self.transactions):
            if t.id == transaction_id:
                del self.transactions[index]
                self._commit("transaction_deleted", t)
                return True

        logger.warning(f"Transaction {transaction_id} not found")
        return False

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for t in self.transactions:
            if t.id == transaction_id:
                return t
        return None

    def get_transaction(self, transaction_id: str) -> Transaction:
        """Look up a transaction by id.

        Raises:
            NotFoundError: If no transaction has this id.
        """
        transaction = self.find_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction with ID '{transaction_id}' not found")
        return transaction

    def import_transactions(self, transactions: List[Transaction]) -> int:
        """Append imported transactions.

        All records are validated before any is added. An imported id that is
        already in use is replaced by a fresh one.

        Returns:
            Number of transactions added.

        Raises:
            ValidationError: If any record is invalid; nothing is added.
        """
        if not transactions:
            return 0

        seen = {t.id for t in self.transactions}
        staged = []
        for transaction in transactions:
            transaction = self._validate_transaction(transaction)
            if transaction.id in seen:
                transaction.id = new_id()
            seen.add(transaction.id)
            staged.append(transaction)

        self.transactions.extend(staged)
        self._commit("transactions_imported", staged)
        return len(staged)

    def categories(self) -> List[str]:
        """Sorted distinct categories of all transactions."""
        return unique_categories(self.transactions)

    def recent(self, limit: int = 5) -> List[Transaction]:
        """Most recently added transactions, newest first."""
        return list(reversed(self.transactions[-limit:])) if limit > 0 else []

    # -- budgets -----------------------------------------------------------

    def upsert_budget(self, category: str, amount) -> Budget:
        """Set the monthly budget for a category, replacing any existing amount.

        Raises:
            ValidationError: If category is empty or amount is not positive.
        """
        category = _required_text(category, "Category")
        amount = to_amount(amount)

        budget = self.find_budget(category)
        if budget is not None:
            budget.amount = amount
            logger.info(f"Budget for {category} updated to {amount}")
        else:
            budget = Budget.create(category, amount)
            self.budgets.append(budget)
            logger.info(f"Budget for {category} set to {amount}")

        self._commit("budget_saved", budget)
        return budget

    def delete_budget(self, category: str) -> bool:
        """Delete the budget for a category.

        Returns:
            True if deleted, False if no budget exists for the category.
        """
        for index, budget in enumerate(self.budgets):
            if budget.category == category:
                del self.budgets[index]
                self._commit("budget_deleted", budget)
                return True

        logger.warning(f"Budget for {category} not found")
        return False

    def find_budget(self, category: str) -> Optional[Budget]:
        for budget in self.budgets:
            if budget.category == category:
                return budget
        return None

    def import_budgets(self, budgets: List[Budget]) -> int:
        """Merge imported budgets; an existing category takes the imported amount.

        Returns:
            Number of budgets imported.
        """
        if not budgets:
            return 0

        staged = []
        for budget in budgets:
            staged.append(
                (_required_text(budget.category, "Category"), to_amount(budget.amount), budget)
            )

        for category, amount, imported in staged:
            existing = self.find_budget(category)
            if existing is not None:
                existing.amount = amount
            else:
                imported.category = category
                imported.amount = amount
                self.budgets.append(imported)

        self._commit("budgets_imported", [b for _, _, b in staged])
        return len(staged)

    # -- settings ----------------------------------------------------------

    def set_currency(self, code: str) -> None:
        """Switch the currency label without touching any amount.

        Use CurrencyService.convert to re-denominate the ledger.

        Raises:
            ValidationError: If code is not a supported currency.
        """
        code = (code or "").strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {code}")
        self.settings.currency = code
        self._commit("currency_changed", code)

    def update_settings(self, **changes) -> Settings:
        """Change auto_save, budget_alerts, monthly_summary or theme.

        Settings are written even when auto-save is being turned off, so the
        choice itself persists.

        Raises:
            ValidationError: For unknown keys or invalid values.
        """
        for key, value in changes.items():
            if key in _SETTING_FLAGS:
                if not isinstance(value, bool):
                    raise ValidationError(f"{key} must be true or false")
            elif key == "theme":
                if value not in THEMES:
                    raise ValidationError(f"Unknown theme: {value}")
            else:
                raise ValidationError(f"Unknown setting: {key}")

        for key, value in changes.items():
            setattr(self.settings, key, value)

        self._commit("settings_changed", dict(changes))
        try:
            self._save_settings()
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
        return self.settings

    # -- bulk --------------------------------------------------------------

    def apply_conversion(
        self,
        transaction_amounts: Dict[str, Decimal],
        budget_amounts: Dict[str, Decimal],
        currency: str,
    ) -> None:
        """Replace every amount and switch the currency in one step.

        Args:
            transaction_amounts: New amount for every transaction id.
            budget_amounts: New amount for every budget id.
            currency: The new currency code.

        Raises:
            ValidationError: If any record is missing from the mappings or a
                new amount is not positive; nothing is changed in that case.
        """
        if currency not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {currency}")
        missing = [t.id for t in self.transactions if t.id not in transaction_amounts]
        missing += [b.id for b in self.budgets if b.id not in budget_amounts]
        if missing:
            raise ValidationError(f"Conversion is missing {len(missing)} record(s)")
        new_amounts = list(transaction_amounts.values()) + list(budget_amounts.values())
        if any(a <= 0 for a in new_amounts):
            raise ValidationError("Conversion produced a non-positive amount")

        for t in self.transactions:
            t.amount = transaction_amounts[t.id]
        for b in self.budgets:
            b.amount = budget_amounts[b.id]
        self.settings.currency = currency

        self._commit("currency_converted", currency)

    def clear_all(self) -> None:
        """Delete every transaction and budget and remove the stored records."""
        self.transactions = []
        self.budgets = []
        for key in LEDGER_KEYS:
            self.store.delete(key)
        self.revision += 1
        logger.info("All data cleared")
        for listener in list(self._listeners):
            listener("cleared", None)
