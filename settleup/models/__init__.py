from settleup.models.group import Group
from settleup.models.group_member import GroupMember
from settleup.models.expense import Expense
from settleup.models.expense_split import ExpenseSplit
from settleup.models.settlement import Settlement
from settleup.models.activity import Activity

__all__ = [
    "Group",
    "GroupMember",
    "Expense",
    "ExpenseSplit",
    "Settlement",
    "Activity",
]
