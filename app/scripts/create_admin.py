# app/scripts/create_admin.py
"""Seed an admin and a cashier account: python -m app.scripts.create_admin"""
import asyncio
import os

from sqlalchemy import select

from app.core.db import AsyncSessionLocal, init_models
from app.core.security import hash_password
from app.models.user_models import User
from app.utils.check_roles import ROLE_ADMIN, ROLE_CASHIER

SEED_USERS = [
    ("admin", os.getenv("SEED_ADMIN_PASSWORD", "admin123"), ROLE_ADMIN),
    ("kasir", os.getenv("SEED_CASHIER_PASSWORD", "kasir123"), ROLE_CASHIER),
]


async def create_users():
    await init_models()
    async with AsyncSessionLocal() as session:
        for username, password, role in SEED_USERS:
            result = await session.execute(select(User).where(User.username == username))
            if result.scalars().first():
                print(f"User '{username}' already exists, skipped")
                continue
            session.add(User(
                username=username,
                password_hash=hash_password(password),
                role=role,
                is_active=True,
            ))
            print(f"{role.capitalize()} user '{username}' created!")
        await session.commit()


if __name__ == "__main__":
    asyncio.run(create_users())
