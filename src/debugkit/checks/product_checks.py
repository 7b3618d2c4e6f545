"""Checks for the ``products`` table through the Supabase API."""

from decimal import Decimal

from postgrest.exceptions import APIError

from src.debugkit.checks.results import CheckFailed, CheckReport, run_check
from src.debugkit.core.services.supabase_clients import SupabaseClients
from src.debugkit.entities.product import Product

EXPECTED_COLUMNS = [
    "id",
    "name",
    "description",
    "price",
    "stock_quantity",
    "created_at",
    "updated_at",
]


def check_table_structure(clients: SupabaseClients) -> list[str]:
    response = clients.admin.table("products").select("*").limit(1).execute()
    if response.data is None:
        raise CheckFailed("Products table not found")

    if response.data:
        missing = [c for c in EXPECTED_COLUMNS if c not in response.data[0]]
        if missing:
            raise CheckFailed(f"Missing columns: {', '.join(missing)}")
    return ["Products table exists", f"Columns: {', '.join(EXPECTED_COLUMNS)}"]


def check_sample_data(clients: SupabaseClients, limit: int = 5) -> list[str]:
    rows = clients.admin.table("products").select("*").limit(limit).execute().data
    details = [f"Found {len(rows)} sample products"]
    details.extend(
        f"{row['name']}: ${row['price']} (Stock: {row['stock_quantity']})" for row in rows
    )
    return details


def check_rls_policies(clients: SupabaseClients) -> list[str]:
    try:
        rows = clients.anon.table("products").select("id, name, price").limit(3).execute().data
    except APIError as e:
        raise CheckFailed(f"Anonymous read access failed: {e.message}") from e

    try:
        response = (
            clients.anon.table("products")
            .insert(
                {
                    "name": "Test Product",
                    "description": "This should fail",
                    "price": 99.99,
                    "stock_quantity": 10,
                }
            )
            .execute()
        )
    except APIError:
        return [
            f"Anonymous read access works: {len(rows)} products retrieved",
            "Anonymous insert properly blocked by RLS",
        ]

    for row in response.data or []:
        clients.admin.table("products").delete().eq("id", row["id"]).execute()
    raise CheckFailed("Anonymous insert should have failed but succeeded")


def check_crud_operations(clients: SupabaseClients) -> list[str]:
    def table():
        return clients.admin.table("products")

    product = Product(
        name="Test CRUD Product",
        description="This is a test product for CRUD operations",
        price=Decimal("123.45"),
        stock_quantity=50,
    )

    created = table().insert(product.to_insert_payload()).execute().data[0]
    product_id = created["id"]
    details = ["CREATE: Product created successfully"]
    try:
        table().select("*").eq("id", product_id).single().execute()
        details.append("READ: Product retrieved successfully")

        updated = (
            table()
            .update(
                {
                    "price": 99.99,
                    "stock_quantity": 25,
                    "description": "Updated test product description",
                }
            )
            .eq("id", product_id)
            .execute()
            .data[0]
        )
        details.append(
            f"UPDATE: price {created['price']} -> {updated['price']}, "
            f"stock {created['stock_quantity']} -> {updated['stock_quantity']}"
        )
    finally:
        table().delete().eq("id", product_id).execute()
    details.append("DELETE: Product deleted successfully")
    return details


def _insert_is_rejected(clients: SupabaseClients, payload: dict) -> bool:
    try:
        response = clients.admin.table("products").insert(payload).execute()
    except APIError:
        return True
    for row in response.data or []:
        clients.admin.table("products").delete().eq("id", row["id"]).execute()
    return False


def check_constraints(clients: SupabaseClients) -> list[str]:
    if not _insert_is_rejected(
        clients, {"name": "Invalid Price Product", "price": -10.0, "stock_quantity": 10}
    ):
        raise CheckFailed("Negative price constraint should have failed")
    if not _insert_is_rejected(
        clients, {"name": "Invalid Stock Product", "price": 10.0, "stock_quantity": -5}
    ):
        raise CheckFailed("Negative stock constraint should have failed")
    return [
        "Negative price constraint working correctly",
        "Negative stock constraint working correctly",
    ]


def run_product_checks(clients: SupabaseClients) -> CheckReport:
    checks = [
        ("Table Structure", check_table_structure),
        ("Sample Data", check_sample_data),
        ("RLS Policies", check_rls_policies),
        ("CRUD Operations", check_crud_operations),
        ("Constraints", check_constraints),
    ]
    return CheckReport(
        title="Products Table Tests",
        results=[run_check(name, lambda fn=fn: fn(clients)) for name, fn in checks],
    )
