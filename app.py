import logging
from contextlib import asynccontextmanager

import pydantic
import uvicorn
from fastapi import FastAPI, Request, Depends, File, Form, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, Field

from config import Settings, configure_logging
from errors import InventoryAppError, AuthError, ValidationError
from models import connect, UserStore, ItemStore
from security import TokenService
from services import AuthGateway, InventoryGateway
from storage import ObjectStorage

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# MongoDB stores integers as at most 8 bytes
BSON_INT64_MIN = -2**63
BSON_INT64_MAX = 2**63 - 1


# ----------------------------
# Pydantic Models
# ----------------------------
class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class LoginRequest(BaseModel):
    username: str
    password: str

class ItemCreate(BaseModel):
    name: str
    description: str
    quantity: int = Field(..., ge=BSON_INT64_MIN, le=BSON_INT64_MAX)

class ItemResponse(BaseModel):
    id: str
    name: str
    description: str
    quantity: int
    image_url: str
    owner_id: str


def invalid_fields_message(errors):
    # RequestValidationError locations start with "body", pydantic's start with the field
    fields = [str(err["loc"][-1]) for err in errors if err.get("loc")]
    return f"Invalid or missing fields: {', '.join(fields)}"


# ------------------------------------------------------------
# Dependencies
# ------------------------------------------------------------

def get_auth(request: Request) -> AuthGateway:
    return request.app.state.auth

def get_inventory(request: Request) -> InventoryGateway:
    return request.app.state.inventory

# reads the Bearer token from the Authorization header, returns the caller's user id
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth: AuthGateway = Depends(get_auth),
) -> str:
    if credentials is None:
        raise AuthError("Unauthorized")
    return auth.authenticate(credentials.credentials)


# ------------------------------------------------------------
# App factory
# ------------------------------------------------------------

def build_gateways(settings: Settings):
    client, users, inventory = connect(settings)
    auth = AuthGateway(UserStore(users), TokenService.from_settings(settings))
    items = InventoryGateway(ItemStore(inventory), ObjectStorage.from_settings(settings))
    return client, auth, items


def create_app(settings: Settings | None = None, auth: AuthGateway | None = None, inventory: InventoryGateway | None = None) -> FastAPI:
    mongo_client = None
    if auth is None or inventory is None:
        settings = settings or Settings.from_env()
        mongo_client, default_auth, default_inventory = build_gateways(settings)
        auth = auth or default_auth
        inventory = inventory or default_inventory

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if mongo_client is not None:
            mongo_client.close()
            logger.info("MongoDB connection closed")

    app = FastAPI(title="Smart Inventory", lifespan=lifespan)
    app.state.auth = auth
    app.state.inventory = inventory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InventoryAppError)
    async def handle_app_error(request: Request, exc: InventoryAppError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

    # JSON bodies get the same {"detail": message} shape as the multipart form
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return await handle_app_error(request, ValidationError(invalid_fields_message(exc.errors())))

    register_routes(app)
    return app


# ------------------------------------------------------------
# Routes
# ------------------------------------------------------------

def register_routes(app: FastAPI):

    @app.post("/api/auth/register", status_code=status.HTTP_201_CREATED)
    async def register_user(payload: RegisterRequest, auth: AuthGateway = Depends(get_auth)):
        return await auth.register(payload.username, payload.password)

    @app.post("/api/auth/login")
    async def user_login(payload: LoginRequest, auth: AuthGateway = Depends(get_auth)):
        return await auth.login(payload.username, payload.password)

    # create an item, the image goes to S3 and the item keeps its URL
    @app.post("/api/inventory", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
    async def create_inventory_item(
        name: str | None = Form(None),
        description: str | None = Form(None),
        quantity: str | None = Form(None),
        image: UploadFile | None = File(None),
        user_id: str = Depends(get_current_user),
        inventory: InventoryGateway = Depends(get_inventory),
    ):
        try:
            item = ItemCreate(name=name, description=description, quantity=quantity)
        except pydantic.ValidationError as e:
            raise ValidationError(invalid_fields_message(e.errors()))

        if image is None:
            raise ValidationError("Image is required")

        data = await image.read()
        return await inventory.create_item(item, data, image.filename, image.content_type, user_id)

    # gets all the items owned by the caller
    @app.get("/api/inventory", response_model=list[ItemResponse])
    async def get_inventory_items(
        user_id: str = Depends(get_current_user),
        inventory: InventoryGateway = Depends(get_inventory),
    ):
        return await inventory.list_items(user_id)


# ------------------------------------------------------------
# Run the app
# ------------------------------------------------------------

def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == '__main__':
    main()
