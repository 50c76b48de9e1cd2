# create_tables.py
from tasktrack.config.settings import settings
from tasktrack.database import Base, SessionLocal, engine
from tasktrack.models import User, UserRole, Task, TaskAudit  # noqa: F401 - registers tables
from tasktrack.utils.security import hash_password

def create_tables(drop_existing: bool = False):
    """Create all tables, optionally dropping them first"""
    try:
        if drop_existing:
            Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        print("✅ All tables created successfully!")

        create_default_admin()

    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        raise

def create_default_admin():
    """Create a default admin user"""
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == settings.DEFAULT_ADMIN_EMAIL).first()
        if existing:
            print("ℹ️  Admin user already exists")
            return

        db.add(User(
            name="System Administrator",
            email=settings.DEFAULT_ADMIN_EMAIL,
            hashed_password=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            manager_id=None
        ))
        db.commit()
        print("✅ Default admin user created!")
        print(f"   Email: {settings.DEFAULT_ADMIN_EMAIL}")
    finally:
        db.close()

if __name__ == "__main__":
    import sys
    create_tables(drop_existing="--drop" in sys.argv)
