"""Data models for the agency store."""

import re
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, TypeVar

_R = TypeVar("_R", bound="Record")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel(name: str) -> str:
    """Convert a snake_case attribute name to its camelCase wire key."""
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


def to_snake(key: str) -> str:
    """Convert a camelCase wire key to its snake_case attribute name."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def patch_to_wire(patch: dict[str, Any]) -> dict[str, Any]:
    """Convert a snake_case patch into a camelCase request body."""
    return {to_camel(key): value for key, value in patch.items()}


class CampaignStatus(str, Enum):
    DRAFT = "Bozza"
    ACTIVE = "Attiva"
    CLOSED = "Chiusa"


class CollaborationStatus(str, Enum):
    CONFIRMED = "Confermata"
    COMPLETED = "Completata"
    CANCELLED = "Cancellata"
    DRAFT = "Bozza"


class PaymentStatus(str, Enum):
    PAID = "Saldato"
    UNPAID = "Non Saldato"
    PENDING = "In attesa"


class AppointmentType(str, Enum):
    SHOOTING = "Shooting"
    PUBLICATION = "Pubblicazione"
    CALL = "Call/Meeting"
    DELIVERY = "Consegna Materiale"
    OTHER = "Altro"


class Role(str, Enum):
    ADMIN = "admin"
    TEAM = "team"
    FINANCE = "finance"
    TALENT = "talent"


def derive_payment_status(fee: float, paid_amount: float) -> PaymentStatus:
    """Derive the payment status of a collaboration from its paid amount.

    Args:
        fee: Talent fee agreed for the collaboration
        paid_amount: Amount paid so far

    Returns:
        UNPAID when nothing was paid, PAID once the fee is covered, PENDING in between
    """
    if paid_amount < 0:
        raise ValueError(f"Paid amount cannot be negative: {paid_amount}")
    if paid_amount == 0:
        return PaymentStatus.UNPAID
    if paid_amount >= fee:
        return PaymentStatus.PAID
    return PaymentStatus.PENDING


@dataclass(frozen=True)
class Record:
    """Base class for every stored entity.

    Attributes are snake_case; the wire format (REST bodies and local
    snapshots) uses camelCase keys. Wire keys without a matching attribute
    are kept in ``extra`` and written back unchanged.
    """

    id: str = ""
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)} - {"extra"}

    @classmethod
    def from_wire(cls: type[_R], data: dict[str, Any]) -> _R:
        """Build a record from a camelCase JSON object."""
        names = cls.field_names()
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            name = to_snake(key)
            if name in names:
                values[name] = value
            else:
                extra[key] = value
        if "id" in values and values["id"] is not None:
            values["id"] = str(values["id"])
        return cls(**values, extra=extra)

    def to_wire(self, skip_none: bool = False) -> dict[str, Any]:
        """Serialize the record to a camelCase JSON object."""
        data = dict(self.extra)
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if skip_none and value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            data[to_camel(f.name)] = value
        return data

    def merged(self: _R, patch: dict[str, Any]) -> _R:
        """Return a copy with the patch shallow-merged over the current fields."""
        invalid = set(patch) - self.field_names()
        if invalid:
            raise ValueError(f"Invalid {type(self).__name__} fields: {sorted(invalid)}")
        return replace(self, **patch)

    @property
    def display_name(self) -> str:
        return self.id


@dataclass(frozen=True)
class Talent(Record):
    """A person under management."""

    first_name: str = ""
    last_name: str = ""
    stage_name: str | None = None
    email: str | None = None
    phone: str | None = None
    birth_date: str | None = None
    instagram: str | None = None
    instagram_followers: int | None = None
    tiktok: str | None = None
    tiktok_followers: int | None = None
    address: str | None = None
    shipping_notes: str | None = None
    iban: str | None = None
    vat: str | None = None
    photo_url: str | None = None
    gallery: list[str] = field(default_factory=list)
    attachments: list[dict[str, Any]] = field(default_factory=list)
    status: str = "active"
    notes: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        return self.stage_name or self.full_name


@dataclass(frozen=True)
class Brand(Record):
    """A client company."""

    name: str = ""
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    logo_url: str | None = None
    website: str | None = None
    vat: str | None = None
    address: str | None = None

    @property
    def display_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class Campaign(Record):
    """A contracted engagement with a brand."""

    name: str = ""
    brand: str | None = None
    tipo: str | None = None
    total_budget: float = 0
    agency_fee_percent: float = 30
    status: str = CampaignStatus.DRAFT.value
    deadline: str | None = None
    period: str | None = None
    notes: str | None = None

    @property
    def agency_share(self) -> float:
        return self.total_budget * self.agency_fee_percent / 100

    @property
    def talent_pool(self) -> float:
        return self.total_budget - self.agency_share

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.brand})" if self.brand else self.name


@dataclass(frozen=True)
class Collaboration(Record):
    """A talent's participation in a campaign."""

    talent_id: str = ""
    campaign_id: str = ""
    brand: str | None = None
    type: str | None = None
    fee: float = 0
    status: str = CollaborationStatus.DRAFT.value
    payment_status: str = PaymentStatus.UNPAID.value
    paid_amount: float = 0
    notes: str | None = None
    deadline: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.talent_id} @ {self.campaign_id}"


@dataclass(frozen=True)
class Appointment(Record):
    """A scheduled activity for a talent."""

    talent_id: str = ""
    talent_name: str | None = None
    brand: str | None = None
    type: str = AppointmentType.OTHER.value
    date: str = ""
    deadline: str | None = None
    status: str = "planned"
    collaboration_id: str | None = None
    description: str | None = None
    location: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.type} {self.date[:10]}"


@dataclass(frozen=True)
class Income(Record):
    """A ledger entry for money coming in for a campaign."""

    campaign_id: str = ""
    amount: float = 0
    status: str = "pending"
    date: str | None = None
    expected_date: str | None = None
    note: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.amount} ({self.status})"


@dataclass(frozen=True)
class ExtraCost(Record):
    """A ledger entry for an extra campaign cost."""

    campaign_id: str = ""
    category: str = "altro"
    amount: float = 0
    date: str | None = None
    provider: str | None = None
    status: str = "unpaid"
    note: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.category} {self.amount} ({self.status})"


@dataclass(frozen=True)
class Notification(Record):
    """A user-facing message with a read flag."""

    type: str = ""
    title: str = ""
    message: str | None = None
    read: bool = False
    link: str | None = None
    created_at: str | None = None
    user_id: str | None = None

    @property
    def display_name(self) -> str:
        return self.title


@dataclass(frozen=True)
class AuthUser(Record):
    """The signed-in user."""

    name: str = ""
    role: str = Role.ADMIN.value
    talent_id: str | None = None


@dataclass
class LinkTalent:
    """Directive to attach a talent while creating a campaign."""

    talent_id: str
    activity_date: str | None = None
    type: str = "Shooting + Social Kit"

    def to_wire(self) -> dict[str, Any]:
        return {
            "enabled": True,
            "talentId": self.talent_id,
            "activityDate": self.activity_date,
            "type": self.type,
        }


@dataclass
class SearchResult:
    """A single global search hit."""

    type: str
    id: str
    name: str
    subtitle: str = ""

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "SearchResult":
        return cls(
            type=data.get("type", ""),
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            subtitle=data.get("subtitle") or "",
        )


class EntityKind(str, Enum):
    """Entity collections; the value is both the REST resource and the storage key."""

    TALENTS = "talents"
    BRANDS = "brands"
    CAMPAIGNS = "campaigns"
    COLLABORATIONS = "collaborations"
    APPOINTMENTS = "appointments"
    INCOME = "income"
    COSTS = "costs"
    NOTIFICATIONS = "notifications"

    @property
    def model(self) -> type[Record]:
        return _MODELS[self]

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]


_MODELS: dict[EntityKind, type[Record]] = {
    EntityKind.TALENTS: Talent,
    EntityKind.BRANDS: Brand,
    EntityKind.CAMPAIGNS: Campaign,
    EntityKind.COLLABORATIONS: Collaboration,
    EntityKind.APPOINTMENTS: Appointment,
    EntityKind.INCOME: Income,
    EntityKind.COSTS: ExtraCost,
    EntityKind.NOTIFICATIONS: Notification,
}

_PREFIXES: dict[EntityKind, str] = {
    EntityKind.TALENTS: "t",
    EntityKind.BRANDS: "brand",
    EntityKind.CAMPAIGNS: "c",
    EntityKind.COLLABORATIONS: "col",
    EntityKind.APPOINTMENTS: "app",
    EntityKind.INCOME: "inc",
    EntityKind.COSTS: "cost",
    EntityKind.NOTIFICATIONS: "notif",
}
