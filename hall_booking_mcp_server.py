from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from hall_booking import BookingEngine, BookingError, BookingSettings, ConflictError, RateLimitError, ValidationError

mcp = FastMCP(
    "Hall Booking MCP Server",
    instructions="Check hall availability and create hall bookings.",
    json_response=True,
)

ENGINE = BookingEngine.from_settings(BookingSettings.from_env())
MCP_CALLER = "mcp"


@mcp.resource("hall-booking://halls")
async def list_halls() -> list[dict[str, Any]]:
    """List bookable halls with their hourly price and capacity."""
    if ENGINE.catalog is None:
        return []
    return [hall.to_dict() for hall in ENGINE.catalog.list_halls()]


@mcp.tool()
def check_availability(venue_id: str, hall_id: str, date: str, start_time: str, end_time: str) -> dict[str, Any]:
    """Check whether a hall is free on a date (YYYY-MM-DD) between two HH:MM times."""
    payload = {"hallId": hall_id, "date": date, "startTime": start_time, "endTime": end_time}
    try:
        result = ENGINE.check_availability(venue_id, payload, MCP_CALLER)
    except BookingError as error:
        return _error_payload(error)
    return {"ok": True, **result.to_dict()}


@mcp.tool()
def create_booking(
    venue_id: str,
    hall_id: str,
    date: str,
    start_time: str,
    end_time: str,
    guest_count: int,
    customer_name: str,
    customer_phone: str,
    customer_email: str,
) -> dict[str, Any]:
    """Book a hall for a time window and return the confirmation with its total amount."""
    payload = {
        "venueId": venue_id,
        "hallId": hall_id,
        "date": date,
        "startTime": start_time,
        "endTime": end_time,
        "guestCount": guest_count,
        "customerDetails": {"name": customer_name, "phone": customer_phone, "email": customer_email},
    }
    try:
        confirmation = ENGINE.create_booking(payload, MCP_CALLER)
    except BookingError as error:
        return _error_payload(error)
    return {"ok": True, **confirmation.to_dict()}


def _error_payload(error: BookingError) -> dict[str, Any]:
    payload: dict[str, Any] = {"ok": False, "code": error.code, "message": error.message}
    if isinstance(error, ValidationError):
        payload["details"] = error.errors
    elif isinstance(error, ConflictError):
        payload["conflicts"] = [window.to_dict() for window in error.conflicts]
    elif isinstance(error, RateLimitError):
        payload["resetMs"] = error.reset_ms
    else:
        payload["message"] = "Server error"
    return payload


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
