"""
Basic sqlacl usage example.

This example demonstrates the core features of sqlacl:
- Creating the ACL tables
- Recording users, roles and permission grants in a transaction
- Reading them back with get and union

Run with:
    ACL_DB_URL=sqlite+aiosqlite:///acl.db python examples/basic_usage.py
"""

import asyncio

from sqlacl import AclStore


async def main():
    # Create the store (loads connection settings from ACL_* / .env)
    store = AclStore.from_config()

    try:
        # =================================================================
        # 1. Create Tables
        # =================================================================
        print("Creating tables...")
        await store.setup()

        # =================================================================
        # 2. Record Rules
        # =================================================================
        print("\nRecording users, roles and permissions...")

        tx = store.begin()
        store.add(tx, "users", "joed", ["admin", "editor"])
        store.add(tx, "users", "jsmith", "editor")
        store.add(tx, "roles", "admin", "joed")
        store.add(tx, "parents", "admin", "editor")
        store.add(tx, "roles_allows_admin", "blogs", ["read", "write", "delete"])
        store.add(tx, "roles_allows_editor", "blogs", ["read", "write"])
        store.add(tx, "roles_allows_editor", "forums", ["read"])
        await store.end(tx)

        # =================================================================
        # 3. Read Rules
        # =================================================================
        print("\nReading rules...")

        print(f"  joed's roles: {await store.get('users', 'joed')}")
        print(f"  editor on blogs: {await store.get('roles_allows_editor', 'blogs')}")
        union = await store.union("roles_allows_editor", ["blogs", "forums"])
        print(f"  editor on blogs+forums: {union}")

        # =================================================================
        # 4. Revoke
        # =================================================================
        print("\nRevoking...")

        tx = store.begin()
        store.remove(tx, "roles_allows_editor", "blogs", "write")
        store.delete(tx, "users", "jsmith")
        await store.end(tx)

        print(f"  editor on blogs: {await store.get('roles_allows_editor', 'blogs')}")
        print(f"  jsmith's roles: {await store.get('users', 'jsmith')}")

    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
