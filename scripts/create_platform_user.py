#!/usr/bin/env python3
"""
Create Platform User Script
===========================
Creates (or reuses) the admin account that receives platform commission,
gives it a wallet and stores it in the platform_settings row.

Setting PLATFORM_USER_ID in the environment still takes precedence over the
stored value.

Usage:
    python scripts/create_platform_user.py --email platform@example.com --phone +910000000000
"""

import argparse
import os
import sys

from dotenv import load_dotenv
from sqlalchemy import select

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gigmarket.core.logging import setup_logging
from gigmarket.db.session import SyncSessionLocal
from gigmarket.models.user import User
from gigmarket.services.wallet_service import WalletService
from gigmarket.utils.constants import ROLE_ADMIN

load_dotenv()


def get_or_create_admin(email: str, phone: str, name: str) -> User:
    with SyncSessionLocal.begin() as db:
        user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is not None:
            print(f"ℹ️  Reusing existing user {user.id} ({user.role})")
            return user

        user = User(
            email=email,
            name=name,
            role=ROLE_ADMIN,
            phone=phone,
            is_phone_verified=True,
            profile={"role": ROLE_ADMIN},
        )
        db.add(user)
        db.flush()
        print(f"✅ Created platform admin {user.id}")
        return user


def main(email: str, phone: str, name: str) -> None:
    user = get_or_create_admin(email, phone, name)

    wallets = WalletService(SyncSessionLocal)
    wallet = wallets.create_wallet(user.id)
    wallets.set_platform_user(user.id)

    print("\n📊 Platform account:")
    print(f"   User:    {user.id}")
    print(f"   Wallet:  {wallet.id} (balance {wallet.balance})")
    print("   Commission is now credited to this wallet")


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Create the commission recipient account')
    parser.add_argument('--email', required=True, help='Login email of the platform account')
    parser.add_argument('--phone', required=True, help='Verified phone number')
    parser.add_argument('--name', default='Platform', help='Display name')

    args = parser.parse_args()
    setup_logging()

    try:
        main(args.email, args.phone, args.name)
    except Exception as e:
        print(f"❌ Error creating platform user: {str(e)}")
        sys.exit(1)
