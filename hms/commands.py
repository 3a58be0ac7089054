import click
from flask.cli import with_appcontext
from hms.extensions import db
from hms.models.billing_models import Service, DEFAULT_SERVICES


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create all database tables."""
    db.create_all()
    click.echo("Database initialized successfully!")


@click.command('seed-services')
@with_appcontext
def seed_services_command():
    """Load the default billing service catalogue."""
    added = 0
    for service_data in DEFAULT_SERVICES:
        existing = Service.query.filter_by(service_name=service_data['service_name']).first()
        if not existing:
            db.session.add(Service(**service_data))
            added += 1
            click.echo(f"Added service: {service_data['service_name']}")
        else:
            click.echo(f"Service already exists: {service_data['service_name']}")

    db.session.commit()
    click.echo(f"Services seeded successfully! ({added} added)")


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_services_command)
