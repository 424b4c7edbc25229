"""Fallback data for a first offline start with no local snapshot."""

from datetime import datetime, timedelta, timezone

from agency_manager.models import (
    Appointment,
    AppointmentType,
    Brand,
    Campaign,
    CampaignStatus,
    EntityKind,
    ExtraCost,
    Income,
    Record,
    Talent,
)


def seed_collections() -> dict[EntityKind, list[Record]]:
    """Build the seed collections; appointment dates are relative to now."""
    now = datetime.now(timezone.utc)

    talents: list[Record] = [
        Talent(
            id="t-1",
            first_name="Marco",
            last_name="Rossi",
            stage_name="MarkRed",
            birth_date="1995-05-12",
            phone="+39 333 1234567",
            email="marco.rossi@advenire.it",
            instagram="https://instagram.com/markred",
            tiktok="https://tiktok.com/@markred",
            address="Via Roma 12, 20121 Milano (MI)",
            shipping_notes="Citofono Rossi - Piano 4. Lasciare in portineria se assente.",
            status="active",
        ),
        Talent(
            id="t-2",
            first_name="Giulia",
            last_name="Bianchi",
            stage_name="JuliaB",
            birth_date="1998-09-20",
            phone="+39 347 7654321",
            email="giulia.b@advenire.it",
            instagram="https://instagram.com/juliab",
            tiktok="https://tiktok.com/@juliab",
            address="Corso Vittorio Emanuele 45, 00186 Roma (RM)",
            shipping_notes="Portone B, citofono 12. Orario preferito: mattina.",
            status="active",
        ),
    ]

    brands: list[Record] = [
        Brand(id="brand-1", name="Amazon Fashion"),
        Brand(id="brand-2", name="Sony PlayStation"),
    ]

    campaigns: list[Record] = [
        Campaign(
            id="c-1",
            name="Winter Collection 2024",
            brand="Amazon Fashion",
            tipo="Brand",
            period="Nov 2024 - Gen 2025",
            deadline="2025-01-31",
            total_budget=45000,
            agency_fee_percent=20,
            status=CampaignStatus.ACTIVE.value,
        ),
        Campaign(
            id="c-2",
            name="Gaming Nights 25",
            brand="Sony PlayStation",
            tipo="Brand",
            period="Dic 2024 - Feb 2025",
            deadline="2025-02-28",
            total_budget=60000,
            agency_fee_percent=15,
            status=CampaignStatus.ACTIVE.value,
        ),
    ]

    appointments: list[Record] = [
        Appointment(
            id="app-1",
            talent_id="t-1",
            talent_name="MarkRed",
            brand="Amazon Fashion",
            type=AppointmentType.SHOOTING.value,
            date=now.isoformat(),
            deadline=(now + timedelta(days=2)).isoformat(),
            status="planned",
            collaboration_id="col-1",
            description="Shooting presso Studio 4 Milano.",
        ),
        Appointment(
            id="app-2",
            talent_id="t-1",
            talent_name="MarkRed",
            brand="Amazon Fashion",
            type=AppointmentType.PUBLICATION.value,
            date=(now + timedelta(days=5)).isoformat(),
            deadline=(now + timedelta(days=5)).isoformat(),
            status="planned",
            collaboration_id="col-1",
            description="Pubblicazione Reel su Instagram.",
        ),
    ]

    income: list[Record] = [
        Income(id="inc-1", campaign_id="c-1", amount=45000, status="received", date="2024-11-20"),
        Income(id="inc-2", campaign_id="c-2", amount=60000, status="pending", date="2025-01-15"),
    ]

    costs: list[Record] = [
        ExtraCost(id="ex-1", campaign_id="c-1", category="videomaker", amount=1500, date="2024-11-15", status="paid"),
        ExtraCost(id="ex-2", campaign_id="c-1", category="luci", amount=500, date="2024-11-15", status="paid"),
    ]

    return {
        EntityKind.TALENTS: talents,
        EntityKind.BRANDS: brands,
        EntityKind.CAMPAIGNS: campaigns,
        EntityKind.APPOINTMENTS: appointments,
        EntityKind.INCOME: income,
        EntityKind.COSTS: costs,
    }
