#!/usr/bin/env python3
"""Quick script to hash the setup password using Argon2."""
import argon2
import sys

from church_attendance.core.constants import MIN_PASSWORD_LENGTH

if len(sys.argv) != 2:
    print("Usage: python hash_password.py 'your-password-here'")
    print()
    print("Example:")
    print("  python hash_password.py 'MySecurePassword'")
    sys.exit(1)

password = sys.argv[1]

if len(password) < MIN_PASSWORD_LENGTH:
    print(f"❌ Error: Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    sys.exit(1)

# Generate Argon2 hash
ph = argon2.PasswordHasher()
password_hash = ph.hash(password)

print("✅ Password hash generated!")
print()
print("Add this to your .env file:")
print("-" * 80)
print(f"APP_PASSWORD={password_hash}")
print("-" * 80)
