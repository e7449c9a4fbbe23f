# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.

Kinds (the API maps each kind to one HTTP status):
- LedgerValidationError  -> client-fixable input problems (400)
- StateConflictError     -> operation not allowed in the current state (409)
- NotFoundError          -> missing account / voucher / document (404)
- LedgerIntegrityError   -> races or bugs; transaction aborted, opaque to clients (500)
"""

from __future__ import annotations


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""

    default_message = "Accounting operation failed"

    def __init__(self, message: str | None = None, *, errors: list | None = None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    def as_dict(self) -> dict:
        data = {"detail": self.message, "code": type(self).__name__}
        if self.errors:
            data["errors"] = [
                e.as_dict() if hasattr(e, "as_dict") else e for e in self.errors
            ]
        return data


# ============================================================
# VALIDATION (client-fixable)
# ============================================================


class LedgerValidationError(AccountingServiceError):
    """Raised when input violates a ledger rule the caller can fix."""

    default_message = "Validation failed"


class ImbalancedVoucherError(LedgerValidationError):
    """Raised when total debit and total credit differ beyond epsilon."""

    default_message = "Voucher is not balanced"


class InsufficientEntriesError(LedgerValidationError):
    """Raised when a voucher has fewer than two entries or lacks a side."""

    default_message = "Voucher must have at least one debit and one credit entry"


class InvalidEntryError(LedgerValidationError):
    """Raised when a voucher entry is malformed or targets an unusable account."""

    default_message = "Voucher contains invalid entries"


class GroupAccountPostingError(InvalidEntryError):
    """Raised when an entry targets a group (non-leaf) account."""

    default_message = "Group accounts cannot receive postings"


class VoidReasonTooShortError(LedgerValidationError):
    """Raised when a void reason is missing or too short."""

    default_message = "Void reason is too short"


class VoidReasonTooLongError(LedgerValidationError):
    """Raised when a void or cancel reason exceeds the stored length."""

    default_message = "Void reason is too long"


class InvalidAccountError(LedgerValidationError):
    """Raised when account master data fails validation."""

    default_message = "Invalid account"


class InvalidDocumentError(LedgerValidationError):
    """Raised when a business document fails validation."""

    default_message = "Invalid document"


# ============================================================
# STATE CONFLICTS
# ============================================================


class StateConflictError(AccountingServiceError):
    """Raised when an operation is not allowed in the current state."""

    default_message = "Operation not allowed in the current state"


class AlreadyPostedError(StateConflictError):
    """Raised when posting something that is already posted."""

    default_message = "Already posted"


class VoidedVoucherError(StateConflictError):
    """Raised when posting or editing a void voucher."""

    default_message = "Cannot post a void voucher"


class NotPostedError(StateConflictError):
    """Raised when voiding a voucher that was never posted."""

    default_message = "Cannot void a draft voucher. Delete it instead."


class AlreadyVoidError(StateConflictError):
    """Raised when voiding a voucher twice."""

    default_message = "Voucher is already void"


class VoucherNotEditableError(StateConflictError):
    """Raised when updating or deleting a non-draft voucher."""

    default_message = "Only draft vouchers can be changed"


class DocumentCancelledError(StateConflictError):
    """Raised when posting a cancelled business document."""

    default_message = "Cannot post a cancelled document"


class DocumentVoucherError(StateConflictError):
    """Raised when a document-owned voucher is voided directly."""

    default_message = "Voucher belongs to a business document; cancel the document instead"


class AccountInUseError(StateConflictError):
    """Raised when an account change would break hierarchy or history."""

    default_message = "Account cannot be changed"


class DuplicateAccountCodeError(StateConflictError):
    """Raised when an account code already exists in the organization."""

    default_message = "Account code already exists"


class DuplicateDocumentNumberError(StateConflictError):
    """Raised when a document number is already used in its scope."""

    default_message = "Document number already exists"


# ============================================================
# NOT FOUND
# ============================================================


class NotFoundError(AccountingServiceError):
    """Raised when a referenced record does not exist in the organization."""

    default_message = "Not found"


class AccountNotFoundError(NotFoundError):
    """Raised when an account cannot be found."""

    default_message = "Account not found"


class VoucherNotFoundError(NotFoundError):
    """Raised when a voucher cannot be found."""

    default_message = "Voucher not found"


class DocumentNotFoundError(NotFoundError):
    """Raised when a business document cannot be found."""

    default_message = "Document not found"


# ============================================================
# INTEGRITY (bug or race; never partially persisted)
# ============================================================


class LedgerIntegrityError(AccountingServiceError):
    """Raised when persistence invariants break; the transaction is aborted."""

    default_message = "Ledger integrity failure"


class DuplicateVoucherNumberError(LedgerIntegrityError):
    """Raised when a unique voucher number could not be allocated."""

    default_message = "Could not allocate a unique voucher number"


class BalanceUpdateError(LedgerIntegrityError):
    """Raised when an account balance update did not apply."""

    default_message = "Account balance update failed"
