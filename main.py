# main.py
# Publisher gateway: POST /dispatch/{service}/{event} → segbird publish.

import json
import logging
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, status

from segbird.config import settings_from_env
from segbird.dispatcher import init
from segbird.errors import (
    InvalidEventError,
    RemoteError,
    ServiceNotConfiguredError,
    ServiceUnavailableError,
)

# Configure basic logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ─── Configuration ────────────────────────────────────────────────────────────
app = FastAPI()

settings = settings_from_env()

logger.info(f"SEGBIRD_JWT_SECRET: {'Set' if settings['jwt_secret'] else 'Not Set'}")
logger.info(f"SEGBIRD_SERVICES: {sorted(settings['services'] or {})}")

if not settings["jwt_secret"]:
    logger.error("SEGBIRD_JWT_SECRET must be set. Exiting.")
    raise RuntimeError("SEGBIRD_JWT_SECRET must be set")

dispatcher = init(server=app, **settings)
logger.info("Dispatcher initialized.")


# ─── Health check ─────────────────────────────────────────────────────────────
@app.get("/health")
async def health():
    logger.info("Health check endpoint hit.")
    return {"status": "ok"}


# ─── Publish an event to a configured service ─────────────────────────────────
@app.post("/dispatch/{service}/{event}")
async def dispatch(service: str, event: str, data: Optional[Dict[str, Any]] = Body(None)):
    logger.info(f"Dispatching {event} to {service}")
    try:
        body = await dispatcher.publish(event, service, data or {})
    except ServiceNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidEventError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except (TypeError, ValueError) as e:
        # payload rejected by the signer, e.g. a reserved iat/exp key
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=e.status, detail=str(e))
    except RemoteError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    # the remote body is returned raw; decode it when it is JSON
    try:
        response = json.loads(body) if body else None
    except ValueError:
        response = body
    return {"service": service, "event": event, "response": response}
