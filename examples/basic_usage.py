"""Basic reporting example using the built-in DI container."""

from datetime import timedelta

from sparkline_reports.core.config import ReportsConfig
from sparkline_reports.core.container import DIContainer
from sparkline_reports.utils.clock import utc_now


def main() -> None:
    config = ReportsConfig(default_grouping="day", default_limit=7)
    store = DIContainer.create_store("demo_records.db", config)
    store.create_table("users", {"login": "TEXT", "created_at": "REAL", "visits": "INTEGER"})
    store.delete_all("users")

    now = utc_now()
    store.insert_many(
        "users",
        [
            {"login": f"user {idx}", "created_at": now - timedelta(days=idx), "visits": idx}
            for idx in range(1, 10)
        ],
    )

    registrations = DIContainer.create_report(store, "users", "registrations", config=config)
    total_visits = DIContainer.create_report(
        store,
        "users",
        "total_visits",
        cumulative=True,
        config=config,
        aggregation="sum",
        value_column="visits",
    )

    for point in registrations.run():
        print("Registrations", point.date_time.date(), point.value)
    for point in total_visits.run(conditions=("visits > ?", 2)):
        print("Total visits", point.date_time.date(), point.value)


if __name__ == "__main__":
    main()
