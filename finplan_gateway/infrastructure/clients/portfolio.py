"""Portfolio API HTTP client for fetching a user's financial snapshot"""

import httpx
from datetime import date
from enum import Enum
from typing import Any, Dict, Type
from finplan_gateway.domain.models import (
    Account,
    AccountType,
    Expense,
    FinancialSnapshot,
    Frequency,
    Income,
    Investment,
    LoanCategory,
    LoanInput,
    Property,
    PropertyType,
    RateType,
    UserPreferences,
)
from finplan_gateway.domain.exceptions import PortfolioAPIError
from finplan_gateway.domain.taxability import parse_income_type
from finplan_gateway.config import settings


def _date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _enum(enum_cls: Type[Enum], value: Any, default: Enum) -> Any:
    if value is None:
        return default
    return enum_cls(str(value.value if isinstance(value, Enum) else value).upper())


def loan_from_dict(data: Dict[str, Any]) -> LoanInput:
    return LoanInput(
        id=str(data["id"]),
        name=data.get("name") or str(data["id"]),
        principal=float(data["principal"]),
        annual_rate=float(data["annual_rate"]),
        min_repayment=float(data.get("min_repayment") or 0.0),
        repayment_frequency=_enum(Frequency, data.get("repayment_frequency"), Frequency.MONTHLY),
        category=_enum(LoanCategory, data.get("category"), LoanCategory.HOME),
        rate_type=_enum(RateType, data.get("rate_type"), RateType.VARIABLE),
        fixed_expiry=_date(data.get("fixed_expiry")),
        interest_only=bool(data.get("interest_only", False)),
        term_months_remaining=int(data.get("term_months_remaining") or 360),
        offset_balance=float(data.get("offset_balance") or 0.0),
        extra_repayment_cap=(
            float(data["extra_repayment_cap"]) if data.get("extra_repayment_cap") is not None else None
        ),
        property_id=data.get("property_id"),
    )


def snapshot_from_dict(data: Dict[str, Any]) -> FinancialSnapshot:
    """
    Build a FinancialSnapshot from its JSON representation.

    Raises:
        KeyError, ValueError, TypeError: on missing or malformed fields
    """
    preferences = data.get("preferences") or {}

    return FinancialSnapshot(
        user_id=str(data["user_id"]),
        as_of=_date(data.get("as_of")) or date.today(),
        current_age=data.get("current_age"),
        income_stability=data.get("income_stability"),
        properties=[
            Property(
                id=str(p["id"]),
                name=p.get("name") or str(p["id"]),
                current_value=float(p["current_value"]),
                property_type=_enum(PropertyType, p.get("property_type"), PropertyType.HOME),
                purchase_price=p.get("purchase_price"),
                purchase_date=_date(p.get("purchase_date")),
                state=p.get("state"),
                suburb=p.get("suburb"),
                construction_cost=p.get("construction_cost"),
                construction_date=_date(p.get("construction_date")),
            )
            for p in data.get("properties", [])
        ],
        loans=[loan_from_dict(loan) for loan in data.get("loans", [])],
        accounts=[
            Account(
                id=str(a["id"]),
                name=a.get("name") or str(a["id"]),
                balance=float(a["balance"]),
                account_type=_enum(AccountType, a.get("account_type"), AccountType.TRANSACTIONAL),
                linked_loan_id=a.get("linked_loan_id"),
            )
            for a in data.get("accounts", [])
        ],
        incomes=[
            Income(
                id=str(i["id"]),
                name=i.get("name") or str(i["id"]),
                amount=float(i["amount"]),
                income_type=parse_income_type(i.get("income_type")),
                frequency=_enum(Frequency, i.get("frequency"), Frequency.MONTHLY),
                property_id=i.get("property_id"),
                franking_percentage=i.get("franking_percentage"),
                payment_type=i.get("payment_type"),
            )
            for i in data.get("incomes", [])
        ],
        expenses=[
            Expense(
                id=str(e["id"]),
                name=e.get("name") or str(e["id"]),
                amount=float(e["amount"]),
                frequency=_enum(Frequency, e.get("frequency"), Frequency.MONTHLY),
                is_essential=bool(e.get("is_essential", True)),
                is_tax_deductible=bool(e.get("is_tax_deductible", False)),
                property_id=e.get("property_id"),
            )
            for e in data.get("expenses", [])
        ],
        investments=[
            Investment(
                id=str(h["id"]),
                name=h.get("name") or str(h["id"]),
                units=float(h["units"]),
                average_price=float(h["average_price"]),
                current_price=float(h["current_price"]),
                asset_class=h.get("asset_class") or "stocks",
                ticker=h.get("ticker"),
                sector=h.get("sector"),
                income_yield=float(h.get("income_yield") or 0.0),
                franking_percentage=float(h.get("franking_percentage") or 0.0),
                reinvest_income=bool(h.get("reinvest_income", True)),
                is_liquid=bool(h.get("is_liquid", True)),
                purchase_date=_date(h.get("purchase_date")),
            )
            for h in data.get("investments", [])
        ],
        preferences=UserPreferences(
            risk_appetite=preferences.get("risk_appetite"),
            retirement_age=preferences.get("retirement_age"),
            time_horizon=preferences.get("time_horizon"),
            debt_comfort=preferences.get("debt_comfort"),
        ),
    )


class PortfolioClient:
    """Client for the external portfolio snapshot API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.portfolio_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_snapshot(self, user_id: str) -> FinancialSnapshot:
        """
        Fetch the current financial snapshot for a user.

        Raises:
            PortfolioAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/portfolio/snapshot",
                    params={"user_id": user_id},
                )
                response.raise_for_status()
                return snapshot_from_dict(response.json())

            except httpx.TimeoutException as e:
                raise PortfolioAPIError(f"Portfolio API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise PortfolioAPIError(f"Portfolio API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise PortfolioAPIError(f"Portfolio API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise PortfolioAPIError(f"Invalid snapshot data from portfolio API: {e}") from e
