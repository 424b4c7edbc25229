"""CLI for agency manager."""

import json
from typing import Annotated, Any, Literal

import structlog
from cyclopts import App, Parameter

from agency_manager.config import Settings, get_config
from agency_manager.config_commands import config_app
from agency_manager.connectivity import probe_connectivity
from agency_manager.models import Campaign, EntityKind, LinkTalent, Record
from agency_manager.store import AgencyStore
from agency_manager.toasts import Toast

logger = structlog.get_logger()

app = App(
    name="agency",
    help="Agency Manager - talents, brands, campaigns and finance, online or offline",
)

app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def _print_toast(toast: Toast) -> None:
    print(f"[{toast.level.value}] {toast.message}")


def get_store(load: bool = True) -> AgencyStore:
    """Build the store from configuration and load its collections."""
    settings = Settings.from_config(get_config())
    store = AgencyStore.from_settings(settings)
    store.toasts.subscribe(_print_toast)
    if load:
        store.load()
    return store


def _parse_value(raw: str) -> Any:
    """Interpret a CLI value as JSON when possible (numbers, booleans, lists), else as text."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _parse_fields(fields: tuple[str, ...]) -> dict[str, Any]:
    """Parse key=value tokens into a snake_case dict."""
    parsed: dict[str, Any] = {}
    for token in fields:
        if "=" not in token:
            raise ValueError(f"Expected key=value, got: {token}")
        key, value = token.split("=", 1)
        parsed[key.strip()] = _parse_value(value.strip())
    return parsed


def _format_record(record: Record) -> str:
    return f"{record.id}: {record.display_name}"


@app.command
def status() -> None:
    """Check whether the agency API is reachable."""
    settings = Settings.from_config(get_config())
    store = AgencyStore.from_settings(settings)
    online = probe_connectivity(store.monitor.client)
    state = "online" if online else "offline"
    print(f"API {settings.base_url}: {state}")
    if store.user:
        print(f"Signed in as {store.user.name} ({store.user.role})")


@app.command(name="list")
def list_entities(kind: EntityKind) -> None:
    """List a collection."""
    store = get_store()
    records = store.collection(kind)
    print(f"Found {len(records)} {kind.value}:\n")
    for record in records:
        print(_format_record(record))


@app.command
def create(kind: EntityKind, *fields: str) -> None:
    """Create an entity from key=value fields (snake_case names)."""
    store = get_store()
    entity = kind.model(**_parse_fields(fields))
    record = store.create(kind, entity)
    print(f"Created {_format_record(record)}")


@app.command
def update(kind: EntityKind, entity_id: str, *fields: str) -> None:
    """Update an entity with key=value fields."""
    store = get_store()
    record = store.update(kind, entity_id, _parse_fields(fields))
    print(f"Updated {_format_record(record)}")


@app.command
def delete(kind: EntityKind, *entity_ids: str) -> None:
    """Delete one or more entities."""
    store = get_store()
    for entity_id in entity_ids:
        store.delete(kind, entity_id)
    print(f"Deleted {len(entity_ids)} {kind.value}")


@app.command(name="campaign-create")
def campaign_create(
    name: str,
    brand: str,
    budget: float,
    fee_percent: float = 30,
    deadline: str | None = None,
    talent: str | None = None,
    activity_date: str | None = None,
) -> None:
    """Create a campaign, optionally linking a talent with a shooting."""
    store = get_store()
    campaign = Campaign(
        name=name,
        brand=brand,
        total_budget=budget,
        agency_fee_percent=fee_percent,
        deadline=deadline,
    )
    link = LinkTalent(talent_id=talent, activity_date=activity_date) if talent else None
    created = store.add_campaign(campaign, link_talent=link)
    print(f"Created campaign {_format_record(created)}")


@app.command
def pay(collaboration_id: str, amount: float) -> None:
    """Record the total amount paid to the talent for a collaboration."""
    store = get_store()
    collaboration = store.register_payment(collaboration_id, amount)
    print(f"{collaboration.id}: paid {collaboration.paid_amount} of {collaboration.fee} ({collaboration.payment_status})")


@app.command
def analytics() -> None:
    """Print revenue, payouts, costs and margin."""
    store = get_store()
    result = store.analytics()
    print(f"Revenue:        {result.revenue:,.2f}")
    print(f"Talent payouts: {result.talent_payouts:,.2f}")
    print(f"Extra costs:    {result.extra_costs:,.2f}")
    print(f"Margin:         {result.margin:,.2f} ({result.margin_percentage}%)")
    print(f"Income:         {result.income_received:,.2f} received, {result.income_pending:,.2f} pending")
    print(
        f"Campaigns:      {result.campaigns_total} total, "
        f"{result.campaigns_active} active, {result.campaigns_closed} closed"
    )


@app.command
def search(query: str) -> None:
    """Search talents, campaigns and brands."""
    store = get_store()
    results = store.global_search(query)
    print(f"Found {len(results)} result(s):\n")
    for result in results:
        subtitle = f" - {result.subtitle}" if result.subtitle else ""
        print(f"[{result.type}] {result.id}: {result.name}{subtitle}")


@app.command
def login(identifier: str, password: str) -> None:
    """Sign in against the agency API."""
    store = get_store(load=False)
    user = store.login(identifier, password)
    print(f"Signed in as {user.name} ({user.role})")


@app.command
def logout() -> None:
    """Forget the stored session."""
    store = get_store(load=False)
    store.logout()


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
