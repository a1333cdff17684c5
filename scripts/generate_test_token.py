#!/usr/bin/env python3
"""Print bearer tokens for each role, for poking the API by hand."""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskflow.core.auth import ROLE_PERMISSIONS, Role, generate_token
from taskflow.domain import ApplicationUser

for role in Role:
    user = ApplicationUser(email=f"{role.value.lower()}@example.com", user_name=role.value.lower())
    token = generate_token(user, [role.value], ROLE_PERMISSIONS[role])
    print(f"{role.value} token (user {user.id}):\n{token.token}\n")
