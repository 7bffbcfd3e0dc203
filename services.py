import asyncio
import logging
from functools import partial

from errors import AuthError, StoreError
from security import hash_password, verify_password
from storage import make_key

logger = logging.getLogger(__name__)


async def run_blocking(func, *args):
    # pymongo calls and password hashing block, run them on the default executor
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args))


# ------------------------------------------------------------
# Auth
# ------------------------------------------------------------

class AuthGateway:
    def __init__(self, users, tokens):
        self.users = users
        self.tokens = tokens

    async def register(self, username, password):
        hashed_password = await run_blocking(hash_password, password)
        user_id = await run_blocking(self.users.create, username, hashed_password)
        logger.info(f"Registered user {username} with id {user_id}")
        return {"message": "User created"}

    async def login(self, username, password):
        user = await run_blocking(self.users.find_by_username, username)

        # same error either way, don't leak which usernames exist
        if not user or not await run_blocking(verify_password, user["password_hash"], password):
            logger.warning(f"Login failed for user {username}")
            raise AuthError("Invalid credentials")

        token = self.tokens.issue(str(user["_id"]))
        logger.info(f"Login successful for user {username}")
        return {"token": token}

    def authenticate(self, token):
        return self.tokens.verify(token)


# ------------------------------------------------------------
# Inventory
# ------------------------------------------------------------

class InventoryGateway:
    def __init__(self, items, storage):
        self.items = items
        self.storage = storage

    async def create_item(self, item, image, filename, content_type, owner_id):
        """Uploads the image, then saves the item pointing at it.

        Upload and insert are not atomic. If the insert fails the image stays in
        the bucket with no item referencing it.
        """
        key = make_key(filename)
        image_url = await self.storage.upload(key, image, content_type)

        try:
            new_item = await run_blocking(
                self.items.create, item.name, item.description, item.quantity, image_url, owner_id
            )
        except StoreError:
            logger.error(f"Item insert failed, {key} is left without an item")
            raise

        logger.info(f"Created item {new_item['id']} for owner {owner_id}")
        return new_item

    async def list_items(self, owner_id):
        return await run_blocking(self.items.list_for_owner, owner_id)
