"""MomoLog with objects, SQL and stack traces.

Shows the structured debug helpers and how a class can choose what
``debug_object`` reports by implementing ``momolog_inspect``.

Requirements:
    pip install momolog

Usage:
    MOMOLOG_ENABLED=true python examples/objects_and_sql.py
"""

import sqlite3

import momolog


class Order:
    def __init__(self, order_id: int, items: list[str]) -> None:
        self.order_id = order_id
        self.items = items
        self._secret_token = "do-not-send"

    def total_items(self) -> int:
        return len(self.items)


class Customer:
    """Exposes only the fields worth seeing in the viewer."""

    def __init__(self, name: str, email: str) -> None:
        self.name = name
        self.email = email

    def momolog_inspect(self) -> dict:
        return {"name": self.name, "email_domain": self.email.split("@")[-1]}


def load_orders(conn: sqlite3.Connection, customer: str) -> list[tuple]:
    query = "SELECT id, item FROM orders WHERE customer = ?"
    momolog.debug_sql(query, [customer], "Load orders")
    return conn.execute(query, (customer,)).fetchall()


def main() -> None:
    # Deliver synchronously so the script does not exit before sending
    momolog.set_async(False)

    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE orders (id INTEGER, item TEXT, customer TEXT)")
    conn.executemany(
        "INSERT INTO orders VALUES (?, ?, ?)",
        [(1, "book", "ann"), (2, "lamp", "ann"), (3, "pen", "bob")],
    )

    rows = load_orders(conn, "ann")
    momolog.debug_array(rows, "Rows")

    order = Order(1, [item for _, item in rows])
    momolog.debug_object(order)
    momolog.debug_object(Customer("Ann", "ann@example.com"))

    # Wrong shapes are reported, not raised
    momolog.debug_array("not a list")

    momolog.debug_trace({"rows": len(rows)}, "Where am I?")
    momolog.shutdown()


if __name__ == "__main__":
    main()
