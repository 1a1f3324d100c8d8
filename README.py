"""
STOREFRONT - System Documentation
=================================

Module-style README for the storefront backend: the order lifecycle of a
small clothing shop (Algeria, prices in DZD) and its Arabic/English shop
assistant. Run `python README.py` to print the outline.

Table of Contents
-----------------
1. System Overview
2. Architecture
3. Package Layout
4. Orders
5. Shop Assistant
6. Configuration & Environment
7. Testing
8. Security & PII Handling

"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{body.strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    Customers place orders (pending), admins move them through processing,
    shipped and delivered, or cancel them. Every new order e-mails the admin
    when notifications are enabled in the site settings. A chat widget
    answers product questions from the catalogue, optionally phrased by an
    external AI provider, always with a rule-based reply as the floor.
    """,
)


ARCHITECTURE = section(
    "2. Architecture",
    """
    - Backend: FastAPI app (`storefront/app/main.py`) exposing `/api/orders`,
      `/api/products`, `/api/admin`, `/api/settings`, `/api/chat`.
    - Services: orders (state machine), notifications (SMTP), site settings,
      auth (JWT bearer tokens).
    - Chat: intent rules -> catalog agent -> AI gateway -> composer fallback.
    - Data: SQLAlchemy over SQLite (`storefront.db`) by default; any
      SQLAlchemy URL via DATABASE_URL. Whoosh ranks product text search.
    """,
)


PACKAGE_LAYOUT = section(
    "3. Package Layout",
    """
    app/       main.py, config.py, controller.py, generate.py, prompt_builder.py, composer.py
    agents/    base_agent.py, catalog_agent.py
    nlu/       intents.py
    data/      database.py, models.py, product_store.py, populate_db.py, raw/products.csv
    schemas/   camelCase pydantic models for the wire format
    services/  orders.py, notifications.py, site_settings.py, auth.py
    utils/     logger.py, security.py, errors.py
    """,
)


ORDERS = section(
    "4. Orders",
    """
    - pending -> processing | shipped | cancelled; processing -> shipped | cancelled;
      shipped -> delivered. delivered and cancelled are terminal.
    - Setting the current status again changes nothing.
    - Shipping writes a ShippedOrder row (tracking number, estimated delivery);
      cancelling writes a CancelledOrder row (reason, default "No reason provided").
    - Each transition is one transaction guarded by a conditional update on the
      status that was read; a lost race answers 400 and writes nothing.
    - ORDER_STRICT_TRANSITIONS=false accepts any enumerated status (legacy admin panel).
    """,
)


SHOP_ASSISTANT = section(
    "5. Shop Assistant",
    """
    - Intents: search, sale, featured, categories, greeting, help, general
      (first keyword match in that order wins).
    - AI_PROVIDER=cohere|together|groq makes one attempt per message; any
      failure falls back to the rule-based composer. rule_based skips the call.
    - A blank message answers 400 with "الرجاء إدخال رسالة صحيحة.".
    """,
)


CONFIG_ENV = section(
    "6. Configuration & Environment",
    """
    - `.env` loaded by python-dotenv; see `storefront/app/config.py`.
    - DATABASE_URL, AI_PROVIDER, COHERE_API_KEY, TOGETHER_API_KEY, GROQ_API_KEY,
      JWT_SECRET, ACCESS_TOKEN_EXPIRE_MINUTES, SETTINGS_CACHE_TTL,
      ORDER_STRICT_TRANSITIONS, CORS_ORIGINS, LOG_LEVEL.
    - Seed products and an admin account: `python -m storefront.data.populate_db`.
    - Serve: `uvicorn storefront.app.main:app --reload`.
    """,
)


TESTING = section(
    "7. Testing",
    """
    - `pip install -e .[test]` then `pytest`.
    - Every test builds its own in-memory SQLite database (`tests/helpers.py`).
    - Provider HTTP and SMTP are mocked; the HTTP surface runs through TestClient.
    """,
)


SECURITY = section(
    "8. Security & PII Handling",
    """
    - Phone numbers are masked in logs (`utils/security.py`).
    - SMTP passwords are stored but never returned by the settings routes.
    """,
)


def as_text() -> str:
    return "\n".join(
        [
            SYSTEM_OVERVIEW,
            ARCHITECTURE,
            PACKAGE_LAYOUT,
            ORDERS,
            SHOP_ASSISTANT,
            CONFIG_ENV,
            TESTING,
            SECURITY,
        ]
    )


def main() -> None:
    print(textwrap.dedent(as_text()))


if __name__ == "__main__":
    main()
