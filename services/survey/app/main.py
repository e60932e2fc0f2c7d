import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.analytics.router import router as analytics_router
from app.config import get_settings
from app.database import dispose_db, init_db
from app.questions.router import router as questions_router
from app.rate_limit import limiter
from app.responses.router import router as responses_router
from app.store import SqlSurveyStore
from app.surveys.router import router as surveys_router
from shared.database.redis_client import close_redis_client, get_redis_client
from shared.middleware.error_handler import error_envelope_middleware, http_exception_handler
from shared.middleware.request_id import request_id_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session_factory = init_db(settings.survey_database_url)
    app.state.store = SqlSurveyStore(session_factory)

    # Redis pool: cache + notifications
    app.state.redis = get_redis_client(settings.redis_url)
    logger.info("Survey service started (env=%s)", settings.env_name)

    yield

    # Shutdown
    await close_redis_client(app.state.redis)
    await dispose_db()


SWAGGER_DESCRIPTION = """\
## Survey Service

Owns survey definitions, respondent submissions and results analytics:
question CRUD, answer validation, per-question aggregation with a
short-lived Redis cache, and CSV export to S3 with an emailed link.

### Domain Tags

| Tag | Description |
|-----|-------------|
| **Surveys** | Survey CRUD + public respondent view |
| **Questions** | Question definitions (6 types) with structural checks |
| **Responses** | Anonymous/authenticated submission + owner reads |
| **Analytics** | Per-question statistics + CSV export |

### Authentication

Owner endpoints require a valid JWT Bearer token in the `Authorization` header.
Token structure: `{"sub": "<user_uuid>", "email": "..."}`.
Submitting a response and reading a public survey need no token.

### Question Types

```
multiple_choice | multiple_selection | yes_no | scale | text | date
```

### Validation Errors

Rejected submissions return `400` with
`{"code": "<reason>", "message": "...", "question_id": "..."}` where reason is one of
`question_not_found`, `required_not_answered`, `invalid_option`, `out_of_range`.
"""


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Survey Insights",
        version="0.1.0",
        description=SWAGGER_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)
    app.add_exception_handler(HTTPException, http_exception_handler)

    app.include_router(surveys_router, prefix="/api/v1")
    app.include_router(questions_router, prefix="/api/v1")
    app.include_router(responses_router, prefix="/api/v1")
    app.include_router(analytics_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        return {"status": "ok", "service": "survey"}

    return app


app = create_app()
