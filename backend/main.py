# main.py
# FastAPI app exposing GET /events - nearby event discovery for the map + card list

import os
import logging
from typing import Optional
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from criteria import build_criteria, split_datetime
from errors import InvalidCriteria, UpstreamFetchError
from models import SearchResponse
from search import search_events

load_dotenv()

app = FastAPI(title="Nearby Events API", version="0.1.0")
# CORS origins
FRONTEND_LOCAL = "http://localhost:3000"
FRONTEND_PROD = os.getenv("FRONTEND_PROD", "")

origins = [FRONTEND_LOCAL]
if FRONTEND_PROD:
    origins.append(FRONTEND_PROD)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# logging
logging.basicConfig(level=logging.INFO)
log = logging.getLogger("nearby-events")

# config / env
TICKETMASTER_API_KEY = os.getenv("TICKETMASTER_API_KEY", "")

# hard cap on the upstream call (seconds)
UPSTREAM_TIMEOUT_S = int(os.getenv("UPSTREAM_TIMEOUT_S", "12"))

# global JSON error handling
# - HTTPException -> { "error": <detail> }
# - any other exception -> { "error": "Server error" }
@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    # concise log. frontend expects JSON only
    log.warning("HTTP %s: %s", exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # log stack once. do not leak details to client
    log.exception("Unhandled exception")
    return JSONResponse(status_code=500, content={"error": "Server error"})

@app.get("/events", response_model=SearchResponse)
async def get_events(
    location: Optional[str] = None,
    radius: Optional[str] = None,
    startDateTime: Optional[str] = None,
    endDateTime: Optional[str] = None,
    eventType: Optional[str] = None,
    timeOfDay: Optional[str] = None,
):
    """
    Search ticketmaster around `location` ("lat,lng").
    Bad criteria -> 400 before any upstream call; upstream failure -> 502/504;
    nothing found -> 200 with an empty events list.
    """
    start_date, start_time = split_datetime(startDateTime)
    end_date, end_time = split_datetime(endDateTime)
    try:
        criteria = build_criteria(
            location, radius,
            start_date=start_date, end_date=end_date,
            start_time=start_time, end_time=end_time,
            category=eventType, time_of_day=timeOfDay,
        )
    except InvalidCriteria as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not TICKETMASTER_API_KEY:
        raise HTTPException(status_code=500, detail="Upstream API key not configured")

    try:
        return await search_events(criteria, TICKETMASTER_API_KEY, timeout_s=UPSTREAM_TIMEOUT_S)
    except UpstreamFetchError as e:
        status = 504 if e.timed_out else 502
        raise HTTPException(status_code=status, detail=f"Unable to fetch events: {e}")

@app.get("/health")
def health():
    return {"ok": True}
