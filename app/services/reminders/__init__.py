"""Birthday / anniversary reminder engine."""
from .channels import ChannelChoice, select_channel
from .gateway import MessagingGateway, SendResult, TwilioGateway
from .guard import InProcessRunGuard, RedisRunGuard, RunGuard
from .ledger import DeliveryLedger, LedgerEntry
from .occasions import OccasionFinder, falls_within_window, next_occurrence, occasion_window
from .rendering import render
from .scheduler import CycleReport, ReminderScheduler, TenantReport, build_scheduler
from .templates import TemplateStore

__all__ = [
    "ChannelChoice",
    "CycleReport",
    "DeliveryLedger",
    "InProcessRunGuard",
    "LedgerEntry",
    "MessagingGateway",
    "OccasionFinder",
    "RedisRunGuard",
    "ReminderScheduler",
    "RunGuard",
    "SendResult",
    "TemplateStore",
    "TenantReport",
    "TwilioGateway",
    "build_scheduler",
    "falls_within_window",
    "next_occurrence",
    "occasion_window",
    "render",
    "select_channel",
]
