"""Seed caseworkers and clients from CSV files.

Usage:
    python -m caseflow.tools.seed_db
    python -m caseflow.tools.seed_db --data-dir data
    python -m caseflow.tools.seed_db --drop  # drop existing data first

Expected files in the data directory:
    caseworkers.csv  tenant_id, display_name, max_client_capacity, specialization,
                     is_active, is_available_for_new_clients
    clients.csv      tenant_id, case_type, case_status
Specializations are separated by ';'. Blank optional cells fall back to defaults.
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import logging
import sys
from pathlib import Path

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.adapters.persistence.database import async_session_factory, engine
from caseflow.adapters.persistence.models import (
    AssignmentHistoryModel,
    AssignmentModel,
    CaseworkerModel,
    ClientModel,
)
from caseflow.adapters.persistence.repositories import SqlCaseworkerRepository, SqlClientRepository
from caseflow.application.ports.caseworker_repo import CaseworkerRepository
from caseflow.application.ports.client_repo import ClientRepository
from caseflow.domain.entities.caseworker import Caseworker
from caseflow.domain.entities.client import Client

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "y"}


def _cell(row: dict[str, str], key: str) -> str:
    return (row.get(key) or "").strip()


def _parse_bool(raw: str, default: bool) -> bool:
    if not raw:
        return default
    return raw.lower() in _TRUE


def _parse_int(raw: str) -> int | None:
    return int(raw) if raw else None


def load_caseworkers(path: Path) -> list[Caseworker]:
    with open(path, encoding="utf-8-sig", newline="") as f:
        rows = list(csv.DictReader(f))

    caseworkers = []
    for line, row in enumerate(rows, start=2):
        name = _cell(row, "display_name")
        tenant = _cell(row, "tenant_id")
        if not name or not tenant:
            logger.warning("%s:%d: missing display_name or tenant_id, skipping", path.name, line)
            continue
        caseworkers.append(Caseworker(
            id=None,
            tenant_id=int(tenant),
            display_name=name,
            is_active=_parse_bool(_cell(row, "is_active"), True),
            is_available_for_new_clients=_parse_bool(
                _cell(row, "is_available_for_new_clients"), True
            ),
            max_client_capacity=_parse_int(_cell(row, "max_client_capacity")),
            specialization={s.strip() for s in _cell(row, "specialization").split(";") if s.strip()},
        ))
    return caseworkers


def load_clients(path: Path) -> list[Client]:
    with open(path, encoding="utf-8-sig", newline="") as f:
        rows = list(csv.DictReader(f))

    clients = []
    for line, row in enumerate(rows, start=2):
        tenant = _cell(row, "tenant_id")
        if not tenant:
            logger.warning("%s:%d: missing tenant_id, skipping", path.name, line)
            continue
        clients.append(Client(
            id=None,
            tenant_id=int(tenant),
            case_type=_cell(row, "case_type") or None,
            case_status=_cell(row, "case_status") or None,
        ))
    return clients


async def seed_records(
    caseworker_repo: CaseworkerRepository,
    client_repo: ClientRepository,
    caseworkers: list[Caseworker],
    clients: list[Client],
) -> dict[str, int]:
    """Persist the loaded records. Returns counts of seeded records."""
    for cw in caseworkers:
        await caseworker_repo.save(cw)
    for client in clients:
        await client_repo.save(client)
    return {"caseworkers": len(caseworkers), "clients": len(clients)}


async def _drop_data(session: AsyncSession) -> None:
    """Delete all data in FK order."""
    for model in [AssignmentHistoryModel, AssignmentModel, ClientModel, CaseworkerModel]:
        await session.execute(delete(model))
    await session.commit()
    logger.info("Dropped all existing data")


async def seed(data_dir: Path, drop: bool = False) -> dict[str, int]:
    caseworker_csv = data_dir / "caseworkers.csv"
    client_csv = data_dir / "clients.csv"
    if not caseworker_csv.exists():
        raise FileNotFoundError(f"No caseworkers.csv found in {data_dir}")

    caseworkers = load_caseworkers(caseworker_csv)
    clients = load_clients(client_csv) if client_csv.exists() else []

    async with async_session_factory() as session:
        if drop:
            await _drop_data(session)
        try:
            counts = await seed_records(
                SqlCaseworkerRepository(session), SqlClientRepository(session), caseworkers, clients
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    return counts


async def _main(data_dir: Path, drop: bool) -> dict[str, int]:
    try:
        return await seed(data_dir, drop=drop)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Seed caseworkers and clients from CSV files")
    parser.add_argument("--data-dir", type=Path, default=Path("data"), help="Directory with CSV files")
    parser.add_argument("--drop", action="store_true", help="Drop existing data before seeding")
    args = parser.parse_args()

    if not args.data_dir.is_dir():
        logger.error("Data directory not found: %s", args.data_dir)
        sys.exit(1)

    counts = asyncio.run(_main(args.data_dir, args.drop))
    logger.info("Seeding complete: %s", counts)


if __name__ == "__main__":
    main()
