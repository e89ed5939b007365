from __future__ import annotations

import json
import logging
import time

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .auth.credentials import CredentialService
from .auth.dependencies import (
    get_credentials,
    get_engine,
    get_users,
    require_admin,
    require_user,
)
from .auth.models import AuthResponse, LoginRequest, PublicUser, RegisterRequest, TokenClaims
from .auth.users import UserService
from .catalog.data_store import RecordStore
from .catalog.engine import QueryEngine
from .catalog.models import (
    Diet,
    Dish,
    DishFilters,
    DishPage,
    IngredientsRequest,
    SearchResults,
    SortOrder,
    normalize_diet,
)
from .config import Settings
from .errors import EmailExistsError, InvalidSortKeyError, PasswordTooLongError, StoreReadError

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("dish_catalog.access")

router = APIRouter(prefix="/api")


# ── Auth endpoints ───────────────────────────────────────────────────────


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(
    body: RegisterRequest | None = None,
    users: UserService = Depends(get_users),
    credentials: CredentialService = Depends(get_credentials),
) -> AuthResponse:
    body = body or RegisterRequest()
    if not (body.username and body.email and body.password):
        raise HTTPException(status_code=400, detail="All fields are required")
    try:
        user = users.register(body.username, body.email, body.password)
    except EmailExistsError:
        raise HTTPException(status_code=409, detail="User with this email already exists")
    except PasswordTooLongError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StoreReadError:
        logger.warning("User collection unreadable, refusing registration", exc_info=True)
        raise HTTPException(status_code=503, detail="Account storage is unavailable")
    return AuthResponse(
        message="User registered successfully",
        user=user.public(),
        token=credentials.issue_token(user),
    )


@router.post("/auth/login", response_model=AuthResponse)
def login(
    body: LoginRequest | None = None,
    users: UserService = Depends(get_users),
    credentials: CredentialService = Depends(get_credentials),
) -> AuthResponse:
    body = body or LoginRequest()
    if not (body.email and body.password):
        raise HTTPException(status_code=400, detail="Email and password are required")
    user = users.authenticate(body.email, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return AuthResponse(
        message="Login successful",
        user=user.public(),
        token=credentials.issue_token(user),
    )


@router.get("/auth/me", response_model=PublicUser)
def auth_me(
    claims: TokenClaims = Depends(require_user),
    users: UserService = Depends(get_users),
) -> PublicUser:
    user = users.get_user(claims.sub)
    if user is None:
        raise HTTPException(status_code=401, detail="User no longer exists")
    return user.public()


# ── Admin endpoints ──────────────────────────────────────────────────────


@router.get("/users", response_model=list[PublicUser])
def list_users(
    claims: TokenClaims = Depends(require_admin),
    users: UserService = Depends(get_users),
) -> list[PublicUser]:
    return users.list_users()


# ── Dish endpoints ───────────────────────────────────────────────────────


@router.get("/dishes", response_model=DishPage)
def list_dishes(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: SortOrder = Query(default=SortOrder.asc, alias="sortOrder"),
    claims: TokenClaims = Depends(require_user),
    engine: QueryEngine = Depends(get_engine),
) -> DishPage:
    try:
        return engine.list_dishes(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    except InvalidSortKeyError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/dishes/search/name", response_model=SearchResults)
def search_dishes(
    q: str = Query(default=""),
    claims: TokenClaims = Depends(require_user),
    engine: QueryEngine = Depends(get_engine),
) -> SearchResults:
    if not q:
        raise HTTPException(status_code=400, detail="Search query is required")
    return SearchResults(results=engine.search_by_name(q))


@router.post("/dishes/by-ingredients", response_model=SearchResults)
def dishes_by_ingredients(
    body: IngredientsRequest | None = None,
    claims: TokenClaims = Depends(require_user),
    engine: QueryEngine = Depends(get_engine),
) -> SearchResults:
    ingredients = body.ingredients if body else None
    if not isinstance(ingredients, list) or not ingredients:
        raise HTTPException(status_code=400, detail="Ingredients array is required")
    if not all(isinstance(i, str) for i in ingredients):
        raise HTTPException(status_code=400, detail="Ingredients must be strings")
    return SearchResults(results=engine.find_by_ingredients(ingredients))


@router.get("/dishes/filter", response_model=SearchResults)
def filter_dishes(
    diet: str | None = None,
    flavor_profile: str | None = None,
    course: str | None = None,
    state: str | None = None,
    region: str | None = None,
    max_prep_time: int | None = Query(default=None, ge=0, alias="maxPrepTime"),
    max_cook_time: int | None = Query(default=None, ge=0, alias="maxCookTime"),
    claims: TokenClaims = Depends(require_user),
    engine: QueryEngine = Depends(get_engine),
) -> SearchResults:
    try:
        diet_value = Diet(normalize_diet(diet)) if diet else None
    except ValueError:
        allowed = ", ".join(d.value for d in Diet)
        raise HTTPException(status_code=422, detail=f"diet must be one of: {allowed}")
    filters = DishFilters(
        diet=diet_value,
        flavor_profile=flavor_profile,
        course=course,
        state=state,
        region=region,
        max_prep_time=max_prep_time,
        max_cook_time=max_cook_time,
    )
    return SearchResults(results=engine.filter_dishes(filters))


@router.get("/dishes/{dish_id}", response_model=Dish)
def get_dish(
    dish_id: str,
    claims: TokenClaims = Depends(require_user),
    engine: QueryEngine = Depends(get_engine),
) -> Dish:
    dish = engine.get_dish(dish_id)
    if dish is None:
        raise HTTPException(status_code=404, detail="Dish not found")
    return dish


# ── App factory ──────────────────────────────────────────────────────────


def _warn_if_catalog_missing(settings: Settings) -> None:
    path = settings.dishes_path
    try:
        empty = not path.is_file() or not json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Dish collection at %s is unreadable", path, exc_info=True)
        return
    if empty:
        logger.warning(
            "No dishes found at %s. Run `python -m dish_catalog.data_ingestion.ingest` to build it.",
            path,
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    store = RecordStore(settings)
    credentials = CredentialService(settings)

    app = FastAPI(title="Dish Catalog API", version="1.0.0")
    app.state.settings = settings
    app.state.credentials = credentials
    app.state.engine = QueryEngine(store, settings)
    app.state.users = UserService(store, credentials)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 1)
        access_logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)
    _warn_if_catalog_missing(settings)
    return app


app = create_app()
