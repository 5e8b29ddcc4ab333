# Business Logic Services
from campus_api.services.account_deletion import (
    AccountDeletionResult,
    CascadeReport,
    delete_account,
    purge_dependent_records,
)
from campus_api.services.payments import initialize_payment, verify_payment
from campus_api.services.registration import register_account

__all__ = [
    "AccountDeletionResult",
    "CascadeReport",
    "delete_account",
    "purge_dependent_records",
    "initialize_payment",
    "verify_payment",
    "register_account",
]
