# ----------------------------
# MongoDB Setup
# ----------------------------

import logging

from bson.errors import BSONError
from pymongo import MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import ConflictError, StoreError

logger = logging.getLogger(__name__)


def get_mongo_collections(client, db_name):
    db = client[db_name]
    users = db["users"]  # user collection
    inventory = db["inventory"]  # inventory collection

    # create indexes (only runs once, MongoDB skips if index already exists)
    users.create_index("username", unique=True)
    inventory.create_index("owner_id")

    return users, inventory


def connect(settings):
    """Returns (client, users, inventory) for the configured database."""
    client = MongoClient(settings.mongo_uri)
    users, inventory = get_mongo_collections(client, settings.mongo_db_name)
    logger.info(f"Connected to MongoDB database {settings.mongo_db_name}")
    return client, users, inventory


def item_to_dict(item):
    # convert ObjectId to string so the document can go out as JSON
    return {
        "id": str(item["_id"]),
        "name": item["name"],
        "description": item["description"],
        "quantity": item["quantity"],
        "image_url": item["image_url"],
        "owner_id": item["owner_id"],
    }


class UserStore:
    def __init__(self, collection):
        self.collection = collection

    def find_by_username(self, username):
        try:
            return self.collection.find_one({"username": username})
        except PyMongoError as e:
            logger.error(f"Failed to look up user {username}: {e}")
            raise StoreError() from e

    def create(self, username, password_hash):
        # the unique index catches races between the lookup and the insert
        if self.find_by_username(username):
            raise ConflictError()

        try:
            result = self.collection.insert_one({"username": username, "password_hash": password_hash})
        except DuplicateKeyError as e:
            raise ConflictError() from e
        except PyMongoError as e:
            logger.error(f"Failed to insert user {username}: {e}")
            raise StoreError() from e

        return str(result.inserted_id)


class ItemStore:
    def __init__(self, collection):
        self.collection = collection

    def create(self, name, description, quantity, image_url, owner_id):
        new_item = {
            "name": name,
            "description": description,
            "quantity": quantity,
            "image_url": image_url,
            "owner_id": owner_id,
        }
        try:
            result = self.collection.insert_one(new_item)
        except (PyMongoError, BSONError, OverflowError) as e:
            # BSON encoding fails before the driver talks to the server
            logger.error(f"Failed to insert item for owner {owner_id}: {e}")
            raise StoreError() from e

        new_item["_id"] = result.inserted_id
        return item_to_dict(new_item)

    def list_for_owner(self, owner_id):
        try:
            return [item_to_dict(item) for item in self.collection.find({"owner_id": owner_id})]
        except PyMongoError as e:
            logger.error(f"Failed to list items for owner {owner_id}: {e}")
            raise StoreError() from e


"""

Terminal code MongoDB:
mongosh
    use SmartInventory
    db.users.getIndexes()
    db.inventory.find({owner_id: "<user id>"})
exit

"""
