"""Database models."""
from txnflow.models.admin_merchant import AdminMerchant
from txnflow.models.automation_rule import AutomationRule
from txnflow.models.transaction import Transaction

__all__ = ["AdminMerchant", "AutomationRule", "Transaction"]
