import sys
import asyncio
from sqlalchemy.future import select
from freightdesk.db.session import AsyncSessionLocal, engine
from freightdesk.models.base import Base
from freightdesk.models.pricing_rule import PricingRule
from freightdesk.models.vehicle_type import VehicleType

# Country names as the geocoder reports them.
DEFAULT_PRICING_RULES = [
    {"zone": 1, "name": "Local", "country": "Spain", "min_km": 0, "max_km": 10, "base_price": 15, "price_per_km": 0.80, "toll_surcharge_pct": 0, "min_price": 15},
    {"zone": 2, "name": "Local Extendido", "country": "Spain", "min_km": 10, "max_km": 50, "base_price": 25, "price_per_km": 0.75, "toll_surcharge_pct": 0, "min_price": 25},
    {"zone": 3, "name": "Regional", "country": "Spain", "min_km": 50, "max_km": 200, "base_price": 60, "price_per_km": 0.65, "toll_surcharge_pct": 0, "min_price": 60},
    {"zone": 4, "name": "Inter-regional", "country": "Spain", "min_km": 200, "max_km": 800, "base_price": 200, "price_per_km": 0.50, "toll_surcharge_pct": 10, "min_price": 120},
    {"zone": 5, "name": "Internacional Portugal", "country": "Portugal", "min_km": 0, "max_km": 800, "base_price": 220, "price_per_km": 0.60, "toll_surcharge_pct": 15, "min_price": 140},
    {"zone": 6, "name": "Internacional Francia", "country": "France", "min_km": 0, "max_km": 800, "base_price": 240, "price_per_km": 0.65, "toll_surcharge_pct": 20, "min_price": 160},
]

DEFAULT_VEHICLE_TYPES = [
    {"name": "Furgoneta", "description": "Ideal para envíos pequeños y mudanzas urbanas", "capacity": "Hasta 800kg / 8m³", "price_per_km": 0.85, "direction_price": 5, "minimum_price": 15},
    {"name": "Camión Pequeño (3.5t)", "description": "Para cargas medianas y distancias cortas", "capacity": "Hasta 3.5t / 20m³", "price_per_km": 0.98, "direction_price": 10, "minimum_price": 30},
    {"name": "Camión Mediano (7.5t)", "description": "Transporte regional de mercancías", "capacity": "Hasta 7.5t / 40m³", "price_per_km": 1.15, "direction_price": 20, "minimum_price": 60},
    {"name": "Camión Grande (12t)", "description": "Cargas pesadas y largas distancias", "capacity": "Hasta 12t / 60m³", "price_per_km": 1.32, "direction_price": 35, "minimum_price": 90},
    {"name": "Tráiler (24t)", "description": "Transporte de gran volumen nacional e internacional", "capacity": "Hasta 24t / 90m³", "price_per_km": 1.57, "direction_price": 50, "minimum_price": 150},
]


async def seed_catalog(create_tables: bool = False) -> int:
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    created = 0
    async with AsyncSessionLocal() as db:
        res = await db.execute(select(VehicleType.name))
        existing_vehicles = set(res.scalars().all())
        for data in DEFAULT_VEHICLE_TYPES:
            if data["name"] not in existing_vehicles:
                db.add(VehicleType(**data))
                created += 1

        res = await db.execute(select(PricingRule.country, PricingRule.zone))
        existing_rules = set(res.all())
        for data in DEFAULT_PRICING_RULES:
            if (data["country"], data["zone"]) not in existing_rules:
                db.add(PricingRule(**data))
                created += 1

        await db.commit()
    await engine.dispose()
    return created


def main():
    create_tables = "--create-tables" in sys.argv[1:]

    try:
        created = asyncio.run(seed_catalog(create_tables))
    except Exception as e:
        print(f"Error seeding catalog: {str(e)}")
        sys.exit(1)

    print(f"Catalog seeded: {created} new records")
    sys.exit(0)


if __name__ == "__main__":
    main()
