from __future__ import annotations

import json

import click
from flask import current_app
from flask.cli import AppGroup, with_appcontext

from storefront.extensions import db
from storefront.models.user import User
from storefront.repositories.category import list_categories
from storefront.services.category_import import (
    category_template,
    export_category_tree,
    import_category_tree,
    validate_category_structure,
)
from storefront.services.category_tree import build_tree, format_tree

categories_cli = AppGroup("categories", help="Inspect, export and import the category hierarchy.")


@categories_cli.command("display")
def display_categories() -> None:
    """Print the current hierarchy as a tree."""
    categories = list_categories()
    if not categories:
        click.echo("No categories found in the database.")
        return
    click.echo("Current Category Hierarchy:")
    click.echo("===========================")
    for line in format_tree(build_tree(categories), lambda c: f"{c.name} ({c.slug})"):
        click.echo(line)


@categories_cli.command("export")
@click.argument("output", type=click.File("w"))
def export_categories(output) -> None:
    """Write the hierarchy as nested JSON."""
    document = export_category_tree()
    json.dump(document, output, indent=2)
    click.echo(f"Exported {len(document)} top-level categories")


@categories_cli.command("template")
@click.argument("output", type=click.File("w"))
def write_template(output) -> None:
    """Write a starter document for `categories import`."""
    json.dump(category_template(current_app.config["DEFAULT_CATEGORY_IMAGE"]), output, indent=2)
    click.echo("Category template written")


@categories_cli.command("import")
@click.argument("source", type=click.File("r"))
@click.option("--dry-run", is_flag=True, help="Validate only.")
def import_categories(source, dry_run: bool) -> None:
    """Validate then create or update categories from nested JSON."""
    try:
        document = json.load(source)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}")

    errors = validate_category_structure(document)
    if errors:
        for error in errors:
            click.echo(f"  - {error}", err=True)
        raise click.ClickException(f"{len(errors)} problem(s) found; nothing imported")
    if dry_run:
        click.echo("Document is valid")
        return

    report = import_category_tree(document, default_image=current_app.config["DEFAULT_CATEGORY_IMAGE"])
    click.echo(f"Created: {len(report.created)}, updated: {len(report.updated)}, failed: {len(report.failed)}")
    for location, reason in report.failed.items():
        click.echo(f"  - {location}: {reason}", err=True)
    if not report.ok:
        raise click.ClickException("Import finished with failures")


@click.command("create-admin")
@click.option("--username", prompt=True)
@click.option("--email", default="")
@with_appcontext
def create_admin(username: str, email: str) -> None:
    """Mirror an admin account from the auth service."""
    if db.session.execute(db.select(User).filter_by(username=username)).scalar_one_or_none():
        click.echo("User already exists")
        return
    db.session.add(User(username=username, email=email or None, is_admin=True))
    db.session.commit()
    click.echo("Admin user created")
