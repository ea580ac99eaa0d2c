#!/usr/bin/env python3
"""Create tables and optionally seed a demo production order.

This script is runnable directly (python scripts/init_db.py) and also import-safe.
If you see `ModuleNotFoundError: No module named 'oee_tracker'`, run from the project root or set PYTHONPATH=. before running.
"""
import sys
from pathlib import Path

# Ensure project root is on sys.path when running the script directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from oee_tracker.db import SessionLocal, Base, engine
from oee_tracker import crud
from oee_tracker.core.errors import DomainError
from oee_tracker.core.state_machine import OrderStateMachine
from oee_tracker.logging_conf import configure_logging


import argparse


def main():
    parser = argparse.ArgumentParser(description='Create database tables and optionally seed a demo production order.')
    parser.add_argument('--demo', action='store_true', help='Create a demo order in created state')
    parser.add_argument('--order-code', default='OF-DEMO-0001', help='Order code for the demo order')
    parser.add_argument('--target', type=int, default=4000, help='Target quantity for the demo order')
    parser.add_argument('--units-per-box', type=int, default=24, help='Units per box for the demo order')
    parser.add_argument('--log-level', default='INFO', help='Logging level')
    args = parser.parse_args()

    configure_logging(args.log_level)
    Base.metadata.create_all(bind=engine)
    print("Tables ready")

    if not args.demo:
        return

    with SessionLocal() as db:
        if crud.get_order_by_code(db, args.order_code):
            print(f"Order {args.order_code} already exists")
            return
        try:
            order = OrderStateMachine(db).create({
                "order_code": args.order_code,
                "article_code": "ART-DEMO",
                "product_name": "Demo product",
                "target_quantity": args.target,
                "target_boxes": args.target // args.units_per_box if args.units_per_box else 0,
                "units_per_box": args.units_per_box,
            })
        except DomainError as exc:
            print('Error while seeding demo order:', exc.message, exc.details)
            sys.exit(1)
        print(f"Created order {order.order_code} (id={order.id}, estimated {order.estimated_production_hours} h)")


if __name__ == '__main__':
    main()
