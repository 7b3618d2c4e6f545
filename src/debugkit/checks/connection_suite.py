"""Connection behaviour suite against the ``products`` table."""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from postgrest.exceptions import APIError

from src.debugkit.checks.results import CheckFailed, CheckReport, run_check
from src.debugkit.core.services.retry import retry_with_backoff
from src.debugkit.core.services.supabase_clients import SupabaseClients, create_test_clients
from src.debugkit.entities.product import TEST_PREFIX
from src.debugkit.runtime.config.config_data import ConfigData

TIMEOUT_SECONDS = 5.0
MISSING_TABLE = "non_existent_table"
RECOVERY_DELAY_MS = 200


class ConnectionSuite:
    """Five checks covering connect, pooling, timeouts, recovery and auth."""

    def __init__(
        self,
        config: ConfigData,
        clients_factory: Callable[[], SupabaseClients] | None = None,
        timeout_seconds: float = TIMEOUT_SECONDS,
    ):
        self._config = config
        self._clients_factory = clients_factory or (
            lambda: create_test_clients(config.supabase)
        )
        self._timeout_seconds = timeout_seconds

    def basic_connection(self) -> list[str]:
        clients = self._clients_factory()
        try:
            clients.admin.table("products").select("id").limit(1).execute()
        except APIError as e:
            raise CheckFailed(f"Admin connection failed: {e.message}") from e
        try:
            clients.anon.table("products").select("id").limit(1).execute()
        except APIError as e:
            raise CheckFailed(f"Anonymous connection failed: {e.message}") from e
        return ["Admin connection: successful", "Anonymous connection: successful"]

    def connection_pooling(self) -> list[str]:
        pool_size = self._config.testing.pool_size
        admins = [self._clients_factory().admin for _ in range(pool_size)]

        def query(client) -> bool:
            try:
                client.table("products").select("id").limit(1).execute()
            except APIError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=pool_size) as pool:
            outcomes = list(pool.map(query, admins))

        failures = outcomes.count(False)
        if failures:
            raise CheckFailed(f"{failures} connections failed")
        return [f"Pool size: {pool_size}", f"Successful connections: {len(outcomes)}"]

    def connection_timeout(self) -> list[str]:
        admin = self._clients_factory().admin
        pool = ThreadPoolExecutor(max_workers=1)
        future = pool.submit(
            lambda: admin.table("products").select("*").limit(1000).execute()
        )
        try:
            future.result(timeout=self._timeout_seconds)
        except FutureTimeoutError:
            return ["Timeout handling: working correctly"]
        finally:
            pool.shutdown(wait=False)
        return ["Query completed before timeout"]

    def connection_recovery(self) -> list[str]:
        admin = self._clients_factory().admin
        try:
            admin.table("products").select("id").limit(1).execute()
        except APIError as e:
            raise CheckFailed("Initial connection failed") from e

        try:
            admin.table(MISSING_TABLE).select("*").execute()
        except APIError:
            pass
        else:
            raise CheckFailed("Expected failure did not occur")

        try:
            retry_with_backoff(
                lambda: admin.table("products").select("id").limit(1).execute(),
                max_retries=self._config.testing.retry_count,
                base_delay_ms=RECOVERY_DELAY_MS,
            )
        except APIError as e:
            raise CheckFailed("Connection recovery failed") from e
        return ["Recovery: successful"]

    def authentication_methods(self) -> list[str]:
        clients = self._clients_factory()
        service_name = f"{TEST_PREFIX}Auth_Product"
        try:
            clients.admin.table("products").insert(
                {"name": service_name, "price": 10.0, "stock_quantity": 1}
            ).execute()
        except APIError:
            service_role = "failed"
        else:
            service_role = "successful"
            clients.admin.table("products").delete().eq("name", service_name).execute()

        try:
            clients.anon.table("products").insert(
                {"name": f"{TEST_PREFIX}Anon_Product", "price": 10.0, "stock_quantity": 1}
            ).execute()
        except APIError:
            anonymous = "properly restricted"
        else:
            anonymous = "unexpected success"

        if service_role != "successful" or anonymous != "properly restricted":
            raise CheckFailed(f"Service role: {service_role}, anonymous: {anonymous}")
        return [f"Service role insert: {service_role}", f"Anonymous insert: {anonymous}"]

    def run(self) -> CheckReport:
        checks = [
            ("Basic Connection", self.basic_connection),
            ("Connection Pooling", self.connection_pooling),
            ("Connection Timeout", self.connection_timeout),
            ("Connection Recovery", self.connection_recovery),
            ("Authentication Methods", self.authentication_methods),
        ]
        return CheckReport(
            title="Database Connection Tests",
            results=[run_check(name, fn) for name, fn in checks],
        )
