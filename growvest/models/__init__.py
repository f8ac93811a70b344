from growvest.models.audit_log import AuditLog
from growvest.models.deposit import Deposit
from growvest.models.failed_job import FailedJob
from growvest.models.investment import Investment
from growvest.models.plan import Plan
from growvest.models.profit_credit import ProfitCredit
from growvest.models.profit_ledger import ProfitLedger
from growvest.models.referral import Referral
from growvest.models.support_ticket import SupportTicket
from growvest.models.user import User
from growvest.models.withdrawal import Withdrawal

__all__ = [
    "AuditLog",
    "Deposit",
    "FailedJob",
    "Investment",
    "Plan",
    "ProfitCredit",
    "ProfitLedger",
    "Referral",
    "SupportTicket",
    "User",
    "Withdrawal",
]
