import logging
from datetime import timedelta

from fastapi import FastAPI, HTTPException, Query

from conventions import COUNTRY_TZ, DEFAULT_METHOD_ID, METHODS, device_utc_offset
from prayer_times import PRAYER_NAMES, AsrJuristic, calculate, parse_date

log = logging.getLogger(__name__)

MAX_DAYS = 31

app = FastAPI(
    title="Prayer Times API",
    description="API service for calculating Islamic prayer times offline",
    version="2.0.0"
)

@app.get("/")
def root():
    return {
        "service": "Prayer Times API",
        "status": "online",
        "endpoints": {
            "/api/timesForGPS": "Get prayer times for GPS coordinates",
            "/api/methods": "List calculation methods",
            "/api/countries": "List country timezone rules",
        }
    }

@app.get("/api/methods")
def list_methods():
    return {
        "default": DEFAULT_METHOD_ID,
        "methods": [
            {
                "id": method_id,
                "name": m.name,
                "fajrAngle": m.fajr_angle,
                "ishaAngle": m.isha_angle,
                "ishaMinutes": m.isha_offset_minutes,
            }
            for method_id, m in METHODS.items()
        ],
    }

@app.get("/api/countries")
def list_countries():
    return {"countries": dict(COUNTRY_TZ)}

@app.get("/api/timesForGPS")
def get_times_for_gps(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    date: str = Query(..., description="YYYY-MM-DD"),
    days: int = Query(1, ge=1, le=MAX_DAYS),
    method: int = DEFAULT_METHOD_ID,
    country: str = "",
    asrFactor: int = Query(AsrJuristic.STANDARD, ge=1, le=2),
    timezoneOffset: int | None = None, # Minutes, same sign as JS getTimezoneOffset (e.g. -180 for UTC+3)
):
    try:
        start_date = parse_date(date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # The caller's device clock stands in for the server's when it sends its offset
    if timezoneOffset is not None:
        offset_hours = -timezoneOffset / 60.0

        def offset_source():
            return offset_hours
    else:
        offset_source = device_utc_offset

    log.debug("timesForGPS lat=%s lng=%s date=%s days=%s method=%s", lat, lng, date, days, method)
    response_times = {}

    for i in range(days):
        current_day = start_date + timedelta(days=i)
        times = calculate(
            current_day, lat, lng, method, country,
            asr_factor=asrFactor, offset_source=offset_source,
        )
        # [0]: Fajr, [1]: Sunrise, [2]: Dhuhr, [3]: Asr, [4]: Maghrib, [5]: Isha
        response_times[current_day.isoformat()] = [times[name] for name in PRAYER_NAMES]

    return {"times": response_times}
