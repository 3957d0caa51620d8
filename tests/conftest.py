"""
Test configuration. Environment is overridden BEFORE any application module
is imported, because app.core.config builds its settings at import time.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "dev"
# Cheapest bcrypt cost; hashing speed is not under test.
os.environ["BCRYPT_ROUNDS"] = "4"
