# apps/echo_service/main.py
# Subscriber example: answers every signed "ping" with the payload it carried.
import logging
import os

from fastapi import FastAPI

from segbird.config import settings_from_env
from segbird.dispatcher import init

app = FastAPI()
logger = logging.getLogger("echo-service")

settings = settings_from_env()
if not settings["jwt_secret"]:
    raise RuntimeError("SEGBIRD_JWT_SECRET env-var not set")

dispatcher = init(server=app, **settings)


async def echo(payload: dict):
    logger.info("Received %s", payload)
    return {"echo": payload}


dispatcher.subscribe(os.getenv("ECHO_EVENT", "ping"), echo)


@app.get("/health")
async def health():
    return {"status": "ok"}
