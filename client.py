import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"


class InventoryClient:
    """Talks to the inventory API and keeps the state a UI would render.

    Every failed call sets ``error_message`` to one generic string for that kind
    of call and leaves the rest of the state alone. Nothing is retried.
    """

    def __init__(self, http: httpx.Client):
        self.http = http
        self.token = ""
        self.is_authenticated = False
        self.items = []
        self.error_message = ""

    @classmethod
    def connect(cls, base_url=DEFAULT_BASE_URL):
        return cls(httpx.Client(base_url=base_url))

    def _auth_headers(self):
        return {"Authorization": f"Bearer {self.token}"}

    def register(self, username, password):
        try:
            response = self.http.post("/api/auth/register", json={"username": username, "password": password})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Register failed: {e}")
            self.error_message = "Registration failed"
            return False

        self.error_message = ""
        return True

    def login(self, username, password):
        try:
            response = self.http.post("/api/auth/login", json={"username": username, "password": password})
            response.raise_for_status()
            token = response.json()["token"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning(f"Login failed: {e}")
            self.error_message = "Invalid credentials"
            return False

        self.token = token
        self.is_authenticated = True
        self.error_message = ""
        # a new token means a fresh item list
        self.fetch_items()
        return True

    def logout(self):
        # tokens can't be revoked, just forget it
        self.token = ""
        self.is_authenticated = False

    def fetch_items(self):
        try:
            response = self.http.get("/api/inventory", headers=self._auth_headers())
            response.raise_for_status()
            items = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Fetching items failed: {e}")
            self.error_message = "Failed to fetch items"
            return False

        self.items = items
        return True

    def add_item(self, name, description, quantity, image, filename, content_type="application/octet-stream"):
        form = {"name": name, "description": description, "quantity": str(quantity)}
        files = {"image": (filename, image, content_type)}
        try:
            response = self.http.post("/api/inventory", data=form, files=files, headers=self._auth_headers())
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Adding item failed: {e}")
            self.error_message = "Failed to add item"
            return False

        self.error_message = ""
        self.fetch_items()
        return True

    def close(self):
        self.http.close()
