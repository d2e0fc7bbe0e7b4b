"""
Seed Demo Expenses Script
Inserts sample expenses for one user so list, search and monthly reports
have something to show. Uses the service role key, so rows are written
regardless of RLS.

Usage: python -m app.scripts.seed_demo_expenses <user_id> [--months 2025-12 2026-01 2026-02]
"""

import argparse
import random
import sys
from datetime import date
from typing import List, Tuple

from app.database.supabase_client import SupabaseClient
from app.modules.expenses.schemas import ExpenseCreate
from app.modules.expenses.service import ExpenseService
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

EXPENSES_PER_MONTH = 15

BASE_EXPENSES = [
    ("Bar Milano Centrale", "Vitto Comune", 4.50),
    ("Taxi 3570", "Taxi", 18.00),
    ("Trenitalia Frecciarossa", "Spese trasporti", 89.00),
    ("Ristorante Da Enzo Roma", "Vitto Oltre Comune", 45.00),
    ("Hotel Artemide", "Alloggio Oltre Comune", 150.00),
    ("Uber", "Taxi", 22.50),
    ("Cancelleria Ufficio", "Altri Costi", 12.90),
    ("Pranzo di Lavoro - Clienti", "Spese Rappresentanza", 120.00),
    ("Starbucks", "Vitto Comune", 8.50),
    ("Italo Treno", "Spese trasporti", 56.00),
    ("Trattoria Milanese", "Vitto Comune", 35.00),
    ("Autogrill Cantagallo", "Vitto Oltre Comune", 14.50),
    ("Parcheggio Linate", "Spese trasporti", 28.00),
    ("Metro Milano ATM", "Spese trasporti", 2.20),
    ("Cena Sociale", "Spese Rappresentanza", 200.00),
]


def parse_month(value: str) -> Tuple[int, int]:
    year, month = value.split("-")
    return int(year), int(month)


def build_demo_expenses(months: List[Tuple[int, int]], rng: random.Random = None) -> List[ExpenseCreate]:
    rng = rng or random.Random()
    expenses = []
    for year, month in months:
        for i in range(EXPENSES_PER_MONTH):
            merchant, category, amount = BASE_EXPENSES[i % len(BASE_EXPENSES)]
            jittered = max(0.5, amount + rng.uniform(-5, 5))
            expenses.append(ExpenseCreate(
                merchant=merchant,
                category=category,
                total=round(jittered, 2),
                currency="EUR",
                expense_date=date(year, month, rng.randint(1, 28)),
            ))
    return expenses


def seed_demo_expenses(service: ExpenseService, user_id: str, months: List[Tuple[int, int]]) -> int:
    created = 0
    for expense in build_demo_expenses(months):
        try:
            service.create_expense(expense, user_id)
            created += 1
        except Exception as e:
            logger.error(f"Error inserting demo expense {expense.merchant}: {e}")
    return created


def main(argv: List[str] = None):
    parser = argparse.ArgumentParser(description="Insert demo expenses for a user")
    parser.add_argument("user_id")
    parser.add_argument("--months", nargs="+", default=["2025-12", "2026-01", "2026-02"],
                        help="Months to fill, as YYYY-MM")
    args = parser.parse_args(argv)

    try:
        service = ExpenseService(SupabaseClient.get_service_client())
        months = [parse_month(m) for m in args.months]
        logger.info("Seeding demo expenses for %s over %d month(s)...", args.user_id, len(months))
        count = seed_demo_expenses(service, args.user_id, months)
        logger.info(f"Seeding completed: {count} expenses created")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
