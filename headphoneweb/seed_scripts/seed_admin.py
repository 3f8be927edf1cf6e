import asyncio
import os
from dotenv import load_dotenv
from sqlmodel import select

from headphoneweb.auth.utils import hash_password, verify_password
from headphoneweb.config.settings import config_settings
from headphoneweb.db.connection import Database
from headphoneweb.db.schema import Admin

load_dotenv()


async def create_admin():
    admin_username = os.environ.get("ADMIN_USERNAME")
    admin_password = os.environ.get("ADMIN_PASSWORD")

    if not admin_username or not admin_password:
        raise SystemExit("Set ADMIN_USERNAME and ADMIN_PASSWORD environment variables before running")

    db = Database(config_settings)
    try:
        async with db.session_maker() as session:
            q = await session.execute(select(Admin).where(Admin.username == admin_username))
            admin = q.scalar_one_or_none()

            if not admin:
                admin = Admin(username=admin_username, password_hash=hash_password(admin_password))
                session.add(admin)
                await session.commit()
                await session.refresh(admin)
                print(f"Created admin id={admin.admin_id} username={admin.username}")
            elif not verify_password(admin_password, admin.password_hash):
                # re-running with a new password rotates it
                admin.password_hash = hash_password(admin_password)
                await session.commit()
                print(f"Rotated password for admin id={admin.admin_id}")
            else:
                print(f"Admin id={admin.admin_id} already up to date")
    finally:
        await db.dispose()

    print("Done.")

if __name__ == "__main__":
    asyncio.run(create_admin())
