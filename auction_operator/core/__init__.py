"""Reconciliation core: state model, reader, dispatcher, engine, scheduler"""
from auction_operator.core.config import OperatorConfig, load_config
from auction_operator.core.errors import (
    OperatorError,
    ConfigError,
    TransportError,
    DispatchError,
    ClassificationError,
)
from auction_operator.core.state import (
    NULL_ADDRESS,
    ZERO_PROOF,
    AuctionSnapshot,
    WinnerInfo,
    SettlementState,
    AuctionCase,
    ActionKind,
    PendingAction,
    Receipt,
    CycleReport,
)
from auction_operator.core.reader import StateReader
from auction_operator.core.dispatcher import ActionDispatcher
from auction_operator.core.engine import (
    ReconciliationEngine,
    classify_case,
    plan_actions,
    placeholder_proof,
    fixed_proof,
)
from auction_operator.core.scheduler import Scheduler, SchedulerStats

__all__ = [
    # Config
    "OperatorConfig",
    "load_config",
    # Errors
    "OperatorError",
    "ConfigError",
    "TransportError",
    "DispatchError",
    "ClassificationError",
    # State
    "NULL_ADDRESS",
    "ZERO_PROOF",
    "AuctionSnapshot",
    "WinnerInfo",
    "SettlementState",
    "AuctionCase",
    "ActionKind",
    "PendingAction",
    "Receipt",
    "CycleReport",
    # Components
    "StateReader",
    "ActionDispatcher",
    "ReconciliationEngine",
    "classify_case",
    "plan_actions",
    "placeholder_proof",
    "fixed_proof",
    "Scheduler",
    "SchedulerStats",
]
