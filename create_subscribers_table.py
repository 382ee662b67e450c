#!/usr/bin/env python3
"""
Script to create the newsletter subscriber table in Supabase
Run this once when setting up a new project
"""

import sys
from dotenv import load_dotenv

load_dotenv()

from dedcore_landing.core.config import settings
from dedcore_landing.core.database import create_subscribers_table, create_supabase_client

def main() -> int:
    client = create_supabase_client(settings)
    if client is None:
        print("❌ Missing Supabase credentials. Please check your .env file.")
        return 1

    try:
        create_subscribers_table(client, settings.SUBSCRIBERS_TABLE)
    except Exception as e:
        print(f"❌ Error creating {settings.SUBSCRIBERS_TABLE} table: {e}")
        return 1

    print(f"🎉 {settings.SUBSCRIBERS_TABLE} table setup completed successfully!")
    return 0

if __name__ == "__main__":
    sys.exit(main())
