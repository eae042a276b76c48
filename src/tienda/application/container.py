from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tienda.config import Settings, load_settings
from tienda.repositories.contracts import StoreRepository
from tienda.repositories.rest_client import RestClient
from tienda.repositories.rest_repo import RestRepository
from tienda.repositories.sqlite_repo import SqliteRepository
from tienda.services.credit_service import CreditService
from tienda.services.excel_service import ExcelService
from tienda.services.expense_service import ExpenseService
from tienda.services.inventory_service import InventoryService
from tienda.services.reporting_service import ReportingService
from tienda.services.sales_service import SalesService
from tienda.services.shopping_service import ShoppingService

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    settings: Settings
    repo: StoreRepository
    inventory: InventoryService
    sales: SalesService
    credit: CreditService
    expenses: ExpenseService
    shopping: ShoppingService
    excel: ExcelService
    reporting: ReportingService


def build_repository(settings: Settings, db_path: Optional[Path | str] = None) -> StoreRepository:
    if settings.backend == "rest":
        if not settings.rest_url or not settings.rest_key:
            raise ValueError("TIENDA_REST_URL and TIENDA_REST_KEY are required for the rest backend.")
        client = RestClient(settings.rest_url, settings.rest_key, timeout=settings.rest_timeout)
        return RestRepository(client)

    if db_path is None:
        raise ValueError("A database path is required for the sqlite backend.")
    repo = SqliteRepository(db_path)
    repo.init_db()
    return repo


def build_container(db_path: Optional[Path | str] = None, settings: Optional[Settings] = None) -> AppContainer:
    settings = settings or load_settings()
    repo = build_repository(settings, db_path)
    log.info("container_built backend=%s", settings.backend)

    inventory = InventoryService(repo)
    sales = SalesService(
        repo,
        enforce_credit_limit=settings.enforce_credit_limit,
        duplicate_window_seconds=settings.duplicate_window_seconds,
    )
    credit = CreditService(repo)
    expenses = ExpenseService(repo)
    shopping = ShoppingService(repo)
    excel = ExcelService(inventory)
    reporting = ReportingService(repo)

    return AppContainer(
        settings=settings,
        repo=repo,
        inventory=inventory,
        sales=sales,
        credit=credit,
        expenses=expenses,
        shopping=shopping,
        excel=excel,
        reporting=reporting,
    )
