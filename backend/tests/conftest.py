"""Root conftest: shared test configuration."""

import os

# Ensure tests don't accidentally use real keys or a real database
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_fake_key")
os.environ.setdefault("SUPABASE_URL", "http://identity.test")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
