"""Flask application for the timber store."""

from __future__ import annotations

import os
from typing import Optional

import click
from flask import Flask

from .config import AppConfig, load_env
from .db.session import init_db, make_engine, make_session_factory
from .routes import account, admin, cart, catalog, orders
from .services import AccountService, CartService, CatalogService, CustomerService, OrderService
from .services.logging import configure_logging


def create_app(config: Optional[AppConfig] = None) -> Flask:
    config = config or load_env()
    configure_logging(config.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["TIMBER_STORE_CONFIG"] = config

    engine = make_engine(config.database_url)
    init_db(engine)
    session_factory = make_session_factory(engine)

    catalog_service = CatalogService(session_factory)
    components = {
        "engine": engine,
        "session_factory": session_factory,
        "accounts": AccountService(session_factory),
        "customers": CustomerService(session_factory),
        "catalog": catalog_service,
        "cart": CartService(session_factory),
        "orders": OrderService(session_factory, on_stock_change=catalog_service.invalidate_cache_for_product),
    }
    app.extensions["timber_store"] = components

    app.register_blueprint(account.account_bp)
    app.register_blueprint(catalog.catalog_bp)
    app.register_blueprint(cart.cart_bp)
    app.register_blueprint(orders.orders_bp)
    app.register_blueprint(admin.admin_bp)

    @app.cli.command("create-admin")
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    @click.option("--first-name", default="Store")
    @click.option("--last-name", default="Admin")
    def create_admin(email, password, first_name, last_name):
        """Register a user and promote it to Admin."""
        accounts = components["accounts"]
        user = accounts.register_user(first_name=first_name, last_name=last_name, email=email, password=password)
        accounts.set_role(user["user_id"], "Admin")
        click.echo(f"created admin {user['user_email']} (id {user['user_id']})")

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5500")), debug=False)


if __name__ == "__main__":
    main()
