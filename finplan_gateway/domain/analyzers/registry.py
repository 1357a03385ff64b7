"""Registered analyzers in execution order"""

from typing import Tuple

from finplan_gateway.domain.analyzers.base import Analyzer
from finplan_gateway.domain.analyzers.cashflow import CashflowAnalyzer
from finplan_gateway.domain.analyzers.debt import DebtAnalyzer
from finplan_gateway.domain.analyzers.investment import InvestmentAnalyzer
from finplan_gateway.domain.analyzers.liquidity import LiquidityAnalyzer
from finplan_gateway.domain.analyzers.property import PropertyAnalyzer
from finplan_gateway.domain.analyzers.risk import RiskAnalyzer
from finplan_gateway.domain.analyzers.tax import TaxAnalyzer
from finplan_gateway.domain.analyzers.time_horizon import TimeHorizonAnalyzer

DEFAULT_ANALYZERS: Tuple[Analyzer, ...] = (
    CashflowAnalyzer(),
    DebtAnalyzer(),
    InvestmentAnalyzer(),
    PropertyAnalyzer(),
    RiskAnalyzer(),
    LiquidityAnalyzer(),
    TaxAnalyzer(),
    TimeHorizonAnalyzer(),
)
