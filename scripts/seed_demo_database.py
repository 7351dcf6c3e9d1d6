#!/usr/bin/env python3
"""Create a demo lookup database and mapping file for local development.

Usage:
    python scripts/seed_demo_database.py          # Create demo files if not present
    python scripts/seed_demo_database.py --reset  # Delete and recreate demo files

Then run:
    dbenum generate demo/dbenum.yaml
"""

import sys
from pathlib import Path

from sqlalchemy import create_engine, text

DEMO_DIR = Path(__file__).parent.parent / "demo"

SCHEMA = [
    """
    CREATE TABLE Currency (
        Id INTEGER PRIMARY KEY,
        Code VARCHAR(3) NOT NULL,
        Country VARCHAR(64),
        Rate DECIMAL(10, 4) NOT NULL
    )
    """,
    """
    CREATE TABLE OrderKind (
        Id INTEGER PRIMARY KEY,
        Name VARCHAR(64) NOT NULL,
        CurrencyId INTEGER REFERENCES Currency (Id),
        Discount INTEGER
    )
    """,
    """
    CREATE TABLE Region (
        Code VARCHAR(8) PRIMARY KEY,
        Name VARCHAR(64) NOT NULL,
        CurrencyId INTEGER NOT NULL REFERENCES Currency (Id)
    )
    """,
]

ROWS = [
    "INSERT INTO Currency VALUES (1, 'CAD', 'Canada', 1.3500)",
    "INSERT INTO Currency VALUES (2, 'USD', 'United States', 1.0000)",
    "INSERT INTO Currency VALUES (3, 'EUR', NULL, 0.9200)",
    "INSERT INTO OrderKind VALUES (1, 'Retail', 2, NULL)",
    "INSERT INTO OrderKind VALUES (2, 'Wholesale', 1, 15)",
    "INSERT INTO OrderKind VALUES (3, '2-Day Rush', NULL, NULL)",
    "INSERT INTO Region VALUES ('NA', 'North America', 2)",
    "INSERT INTO Region VALUES ('EU', 'Europe', 3)",
]

MAPPING = """\
source:
  type: sqlite
  path: ${DBENUM_DEMO_DB:-demo/lookups.db}

tables:
  - table: Currency
    type: Acme.Finance.Currency
    key: Id
    label: Code
    attributes: [Serializable]
    columns:
      - Id
      - Country
      - column: Rate
        function: ExchangeRate

  - table: OrderKind
    type: Acme.Sales.OrderKind
    key: Id
    label: Name
    columns:
      - column: CurrencyId
        function: Currency
        returns: Acme.Finance.Currency
      - column: Discount
        returns: int

  - table: Region
    type: Acme.Sales.Region
    key: Code
    label: Name
    columns:
      - column: CurrencyId
        function: Currency
        returns: Acme.Finance.Currency
"""


def seed_demo_database(reset: bool = False) -> None:
    """Create the demo SQLite database and mapping file."""
    database = DEMO_DIR / "lookups.db"
    mapping = DEMO_DIR / "dbenum.yaml"

    if database.exists():
        if not reset:
            print("Demo database already exists. Use --reset to recreate.")
            return
        print("Resetting demo database...")
        database.unlink()

    DEMO_DIR.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{database}")
    with engine.begin() as conn:
        for statement in SCHEMA + ROWS:
            conn.execute(text(statement))
    engine.dispose()

    mapping.write_text(MAPPING, encoding="utf-8")
    print(f"Created {database}")
    print(f"Created {mapping}")


if __name__ == "__main__":
    seed_demo_database(reset="--reset" in sys.argv)
