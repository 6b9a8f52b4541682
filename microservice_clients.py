"""Helpers to call the habit microservice over ZeroMQ."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Iterable, Optional

import zmq

import config

_CONTEXT = zmq.Context.instance()


# ---------- Low-level send helpers ----------
def _make_socket(port: int):
    socket = _CONTEXT.socket(zmq.REQ)
    socket.setsockopt(zmq.RCVTIMEO, config.TIMEOUT_MS)
    socket.setsockopt(zmq.SNDTIMEO, config.TIMEOUT_MS)
    socket.setsockopt(zmq.LINGER, 0)
    socket.connect(f"tcp://localhost:{port}")
    return socket


def _send_bytes(port: int, payload: dict):
    socket = _make_socket(port)
    try:
        socket.send_string(json.dumps(payload))
        raw = socket.recv()
        return json.loads(raw.decode("utf-8")), None
    except zmq.error.Again:
        return None, f"Timed out contacting service on port {port}."
    except (zmq.ZMQError, ValueError) as exc:
        return None, f"Service error on port {port}: {exc}"
    finally:
        socket.close()


def _call(payload: dict, port: Optional[int]):
    response, error = _send_bytes(port or config.service_port(), payload)
    if error:
        return None, error
    if response.get("status") != "ok":
        return None, response.get("error", "Unknown habit service error.")
    return response, None


def _date_param(when):
    if isinstance(when, (date, datetime)):
        return when.isoformat()
    return when


# ---------- Service callers ----------
def register_habit(title: str, weekdays: Iterable[int], port: Optional[int] = None):
    return _call(
        {"request_type": "register_habit", "title": title, "weekdays": list(weekdays)},
        port,
    )


def list_habits(port: Optional[int] = None):
    return _call({"request_type": "list_habits"}, port)


def day_overview(when, port: Optional[int] = None):
    """Due and completed habit ids for a day."""
    return _call({"request_type": "get_day", "date": _date_param(when)}, port)


def toggle_habit(habit_id: str, when=None, port: Optional[int] = None):
    payload = {"request_type": "toggle_habit", "habit_id": habit_id}
    if when is not None:
        payload["date"] = _date_param(when)
    return _call(payload, port)


def summary(port: Optional[int] = None):
    return _call({"request_type": "get_summary"}, port)
