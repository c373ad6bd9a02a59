"""
Local stand-in for the device telemetry endpoint, for development runs.

Envelopes are kept in memory only; each device keeps the most recent
SINK_MAX_PER_TOKEN of them and older ones are dropped.
"""
from __future__ import annotations

import os
from collections import defaultdict, deque
from typing import Any, DefaultDict, Deque, Dict, List, Set

from fastapi import FastAPI, HTTPException

from telemetry_pusher.dispatcher import TelemetryEnvelope

# Comma separated allow-list; empty accepts any token.
SINK_DEVICE_TOKENS = os.getenv("SINK_DEVICE_TOKENS", "")
SINK_MAX_PER_TOKEN = int(os.getenv("SINK_MAX_PER_TOKEN", "1000"))


def allowed_tokens() -> Set[str]:
    return {t.strip() for t in SINK_DEVICE_TOKENS.split(",") if t.strip()}


RECEIVED: DefaultDict[str, Deque[Dict[str, Any]]] = defaultdict(lambda: deque(maxlen=SINK_MAX_PER_TOKEN))

app = FastAPI(title="Telemetry Sink", version="0.1.0")


@app.get("/healthz")
def healthz() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/api/v1/{device_token}/telemetry")
def ingest_telemetry(device_token: str, body: TelemetryEnvelope) -> Dict[str, Any]:
    tokens = allowed_tokens()
    if tokens and device_token not in tokens:
        raise HTTPException(status_code=401, detail="unknown_device_token")

    RECEIVED[device_token].append(body.model_dump())
    return {"status": "ok", "stored": len(RECEIVED[device_token])}


@app.get("/api/v1/{device_token}/telemetry")
def list_telemetry(device_token: str) -> List[Dict[str, Any]]:
    """
    Envelopes received for a device, oldest first.
    Usage (example):
      curl http://localhost:8080/api/v1/<TOKEN>/telemetry
    """
    return list(RECEIVED.get(device_token, []))
