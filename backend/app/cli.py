"""Management CLI.

Usage:
    python -m app.cli create-admin EMAIL PASSWORD [FULL NAME]   # Create or promote an admin
    python -m app.cli seed                                      # Insert demo listings
"""

import asyncio
import sys

from sqlalchemy import select

from app.auth.password import hash_password
from app.database import async_session
from app.models.user import User, UserRole
from app.services import listings

SEED_EMAIL = "agente@brymar.do"

SEED_PROPERTY = {
    "title": "Villa frente al mar en Punta Cana",
    "description": (
        "Villa de lujo con acceso directo a la playa, piscina privada, "
        "terraza con vista al mar y áreas sociales amplias."
    ),
    "price": 850000,
    "surface": 420,
    "property_type": "villa",
    "bedrooms": 4,
    "bathrooms": 5,
    "characteristics": [
        {"id": "pool", "name": "Piscina", "category": "amenity", "selected": True},
        {"id": "beach", "name": "Acceso a playa", "category": "location", "selected": True},
    ],
    "coordinates": {"latitude": 18.5601, "longitude": -68.3725},
    "address": {
        "street": "Calle Playa Bávaro 12",
        "city": "Punta Cana",
        "province": "La Altagracia",
    },
    "status": "published",
}

SEED_LAND = {
    "name": "Terreno agrícola en Jarabacoa",
    "description": (
        "Terreno fértil con agua de río, acceso por carretera asfaltada "
        "y vista a las montañas de la cordillera central."
    ),
    "price": 120000,
    "surface": 25000,
    "land_type": "agricultural",
    "characteristics": [
        {"id": "water", "name": "Agua de río", "category": "utilities", "selected": True},
    ],
    "location": "Jarabacoa, La Vega",
    "status": "published",
}

SEED_POST = {
    "title": "Cómo invertir en bienes raíces en República Dominicana",
    "content": (
        "Invertir en bienes raíces en República Dominicana ofrece ventajas "
        "fiscales, alta demanda turística y un mercado en crecimiento. "
        "En este artículo repasamos los pasos legales y financieros."
    ),
    "category": "investment-tips",
    "status": "published",
}


async def create_admin(email: str, password: str, full_name: str) -> None:
    async with async_session() as db:
        result = await db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if user:
            user.role = UserRole.ADMIN
            user.is_active = True
            print(f"  Promoted existing user {email} to admin")
        else:
            db.add(User(
                email=email.lower(),
                hashed_password=hash_password(password),
                full_name=full_name,
                role=UserRole.ADMIN,
            ))
            print(f"  Created admin {email}")
        await db.commit()


async def seed() -> None:
    async with async_session() as db:
        result = await db.execute(select(User).where(User.email == SEED_EMAIL))
        agent = result.scalar_one_or_none()
        if agent:
            print("  Seed data already present")
            return

        agent = User(
            email=SEED_EMAIL,
            hashed_password=hash_password("brymar-demo"),
            full_name="Agente Demo",
            role=UserRole.AGENT,
        )
        db.add(agent)
        await db.flush()

        await listings.create_property(db, agent, SEED_PROPERTY)
        await listings.create_land(db, agent, SEED_LAND)
        await listings.create_blog_post(db, agent, SEED_POST)
        await db.commit()
        print(f"  Seeded 1 property, 1 land, 1 blog post (agent {SEED_EMAIL})")


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "create-admin" and len(sys.argv) >= 4:
        name = " ".join(sys.argv[4:]) or "Administrador"
        asyncio.run(create_admin(sys.argv[2], sys.argv[3], name))
    elif cmd == "seed":
        asyncio.run(seed())
    else:
        print("Usage: python -m app.cli [create-admin EMAIL PASSWORD [NAME]|seed]")
