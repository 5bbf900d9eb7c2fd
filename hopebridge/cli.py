import random
from datetime import timedelta

import click
from faker import Faker
from flask import current_app
from flask.cli import with_appcontext

from hopebridge.extensions import db
from hopebridge.models import Payment, Sponsorship, Wish
from hopebridge.models.mixins import utcnow
from hopebridge.models.sponsorship import SPONSORSHIP_FREQUENCIES
from hopebridge.services import build_services
from hopebridge.store import current_store

fake = Faker()

WISH_ITEMS = [
    "School uniform",
    "Pair of shoes",
    "Mathematics textbook",
    "Mosquito net",
    "Winter blanket",
    "Football",
    "Backpack",
    "Box of crayons",
]


@click.group("hopebridge")
def hopebridge_cli():
    """HopeBridge Connect operator tools."""
    pass


@hopebridge_cli.command("seed-demo")
@click.option("--orphanages", default=2, show_default=True, help="Number of demo orphanages.")
@click.option("--children", default=4, show_default=True, help="Children per orphanage.")
@click.option("--wishes", default=2, show_default=True, help="Pending wishes per child.")
@click.option("--sponsorships", default=3, show_default=True, help="Number of demo sponsorships.")
@click.option("--clear", is_flag=True, help="Clear existing wishes and sponsorships first.")
@with_appcontext
def seed_demo(orphanages, children, wishes, sponsorships, clear):
    """Seed demo wishes and sponsorships."""
    if clear:
        _clear_data()

    kids = _seed_wishes(orphanages, children, wishes)
    _seed_sponsorships(sponsorships, kids)
    db.session.commit()

    click.secho(f"Seeded {len(kids)} children across {orphanages} orphanage(s).", fg="bright_green", bold=True)


def _clear_data():
    click.secho("Clearing demo data...", fg="yellow")
    for model in (Wish, Sponsorship):
        deleted = model.query.delete()
        click.secho(f"  {deleted} {model.__name__} removed", fg="yellow")
    db.session.commit()


def _seed_wishes(orphanage_count, children_per_orphanage, wishes_per_child):
    kids = []
    for _ in range(orphanage_count):
        orphanage = {"id": fake.unique.bothify("orph_####"), "name": f"{fake.city()} Children's Home"}
        for _ in range(children_per_orphanage):
            child = {"id": fake.unique.bothify("child_#####"), "name": fake.first_name(), "orphanage": orphanage}
            kids.append(child)
            for item in random.sample(WISH_ITEMS, k=min(wishes_per_child, len(WISH_ITEMS))):
                db.session.add(
                    Wish(
                        child_id=child["id"],
                        child_name=child["name"],
                        orphanage_id=orphanage["id"],
                        item=item,
                        quantity=fake.random_int(1, 3),
                        status="pending",
                    )
                )
    return kids


def _seed_sponsorships(count, kids):
    if not kids:
        return
    for _ in range(count):
        child = random.choice(kids)
        db.session.add(
            Sponsorship(
                donor_id=fake.unique.email(),
                donor_name=fake.name(),
                orphanage_id=child["orphanage"]["id"],
                orphanage_name=child["orphanage"]["name"],
                child_id=child["id"],
                child_name=child["name"],
                amount=float(fake.random_int(min=5, max=50) * 1000),
                currency=current_app.config.get("DEFAULT_CURRENCY", "XAF"),
                frequency=random.choice(SPONSORSHIP_FREQUENCIES),
                status="active",
                start_date=fake.date_between(start_date="-1y", end_date="today").isoformat(),
            )
        )


@hopebridge_cli.command("pending-payments")
@click.option("--older-than", default=30, show_default=True, help="Minimum age in minutes.")
@with_appcontext
def pending_payments(older_than):
    """List payments still pending after the given age."""
    cutoff = utcnow() - timedelta(minutes=older_than)
    rows = (
        Payment.query.filter(Payment.status == "pending", Payment.created_at <= cutoff)
        .order_by(Payment.created_at)
        .all()
    )
    if not rows:
        click.secho("No stuck pending payments.", fg="bright_green")
        return
    for p in rows:
        click.echo(
            f"{p.id}  {p.created_at:%Y-%m-%d %H:%M}  {p.currency} {p.amount:<10}  "
            f"donor={p.donor_id}  tx={p.transaction_id or '-'}"
        )
    click.secho(f"{len(rows)} pending payment(s)", fg="yellow")


@hopebridge_cli.command("confirm-payment")
@click.argument("payment_id")
@click.argument("transaction_id")
@with_appcontext
def confirm_payment(payment_id, transaction_id):
    """Verify TRANSACTION_ID with the gateway and settle PAYMENT_ID."""
    svc = build_services(current_app.config, current_store())
    verified = svc.donors.confirm_payment(payment_id, transaction_id)
    if verified:
        click.secho(f"Payment {payment_id} confirmed.", fg="bright_green", bold=True)
    else:
        click.secho(f"Payment {payment_id} not verified.", fg="red", bold=True)
        raise SystemExit(1)
