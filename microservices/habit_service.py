"""Microservice exposing the habit tracker over a ZeroMQ REP socket."""

import json
import logging
import sys
import threading

import zmq

from errors import HabitLedgerError

logger = logging.getLogger(__name__)

REQUEST_TYPES = ("register_habit", "list_habits", "get_day", "toggle_habit", "get_summary")


# =========================
# Request / Response helpers
# =========================

def make_error_response(error_type, message):
    return {"status": "error", "error_type": error_type, "error": message}


def make_success_response(**payload):
    response = {"status": "ok"}
    response.update(payload)
    return response


def serialize_response(response_dict):
    """Deterministic JSON encoding: sorted keys, no extra spaces."""
    return json.dumps(response_dict, sort_keys=True, separators=(",", ":")).encode("utf-8")


def parse_request_bytes(raw_bytes):
    """Decode raw bytes into a dict, or return an error response."""
    try:
        request = json.loads(raw_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None, make_error_response("invalid_request", "Invalid JSON in request body.")
    if not isinstance(request, dict):
        return None, make_error_response("invalid_request", "Request must be a JSON object.")
    return request, None


class MissingField(Exception):
    pass


def _require(request, key):
    if key not in request:
        raise MissingField(key)
    return request[key]


# =========================
# Handlers
# =========================

def _register_habit(tracker, request):
    habit_id = tracker.register_habit(_require(request, "title"), _require(request, "weekdays"))
    return make_success_response(habit_id=habit_id)


def _list_habits(tracker, request):
    return make_success_response(habits=[h.to_dict() for h in tracker.list_habits()])


def _get_day(tracker, request):
    status = tracker.get_day(_require(request, "date"))
    return make_success_response(**status.to_dict())


def _toggle_habit(tracker, request):
    state = tracker.toggle_habit(_require(request, "habit_id"), request.get("date"))
    return make_success_response(completed=state.completed)


def _get_summary(tracker, request):
    return make_success_response(summary=[s.to_dict() for s in tracker.get_summary()])


HANDLERS = {
    "register_habit": _register_habit,
    "list_habits": _list_habits,
    "get_day": _get_day,
    "toggle_habit": _toggle_habit,
    "get_summary": _get_summary,
}


def process_request(tracker, request: dict) -> dict:
    """Dispatch one decoded request to the tracker; dict in, dict out."""
    request_type = request.get("request_type")
    handler = HANDLERS.get(request_type)
    if handler is None:
        return make_error_response(
            "invalid_request",
            f"Unsupported request_type {request_type!r}. Expected one of {', '.join(REQUEST_TYPES)}.",
        )
    try:
        return handler(tracker, request)
    except MissingField as exc:
        return make_error_response("invalid_request", f"Missing field {exc.args[0]!r}.")
    except HabitLedgerError as exc:
        if exc.code == "storage_error":
            logger.error("Storage failure handling %s: %s", request_type, exc)
        return make_error_response(exc.code, str(exc))


def handle_message(tracker, raw_bytes):
    """Pure handler: bytes in, bytes out."""
    request, parse_error = parse_request_bytes(raw_bytes)
    if parse_error is not None:
        return serialize_response(parse_error)
    return serialize_response(process_request(tracker, request))


# =========================
# ZeroMQ server
# =========================

def build_server_socket(address, context=None):
    """Create and bind the REP socket for the service."""
    if context is None:
        context = zmq.Context.instance()
    socket = context.socket(zmq.REP)
    socket.setsockopt(zmq.LINGER, 0)
    socket.bind(address)
    return socket


def serve_requests(socket, tracker, stop_flag, poll_ms=1000):
    """Process inbound requests until stop_flag[0] is set."""
    while not stop_flag[0]:
        if not socket.poll(timeout=poll_ms):
            continue
        raw_request = socket.recv()
        try:
            response_bytes = handle_message(tracker, raw_request)
        except Exception as exc:
            logger.exception("Unhandled error while serving request")
            response_bytes = serialize_response(
                make_error_response("internal_error", f"Internal error: {exc}")
            )
        socket.send(response_bytes)


def shutdown_listener(stop_flag, stream=None):
    """Wait for 'q' then Enter on stream and set stop_flag[0]."""
    stream = stream if stream is not None else sys.stdin
    print("Press 'q' then Enter to stop the habit service...", file=sys.stderr)
    for line in stream:
        if line.strip().lower() == "q":
            stop_flag[0] = True
            print("[habit-service] Shutdown requested...", file=sys.stderr)
            break


def start_shutdown_listener(stop_flag, stream=None):
    listener_thread = threading.Thread(
        target=shutdown_listener,
        args=(stop_flag, stream),
        daemon=True,
    )
    listener_thread.start()
    return listener_thread


def run_service(tracker, port, stream=None):
    socket = build_server_socket(f"tcp://*:{port}")
    print(f"[habit-service] Listening on port {port}...", file=sys.stderr)
    stop_flag = [False]
    start_shutdown_listener(stop_flag, stream)
    try:
        serve_requests(socket, tracker, stop_flag)
    except KeyboardInterrupt:
        print("\n[habit-service] Interrupted via keyboard.", file=sys.stderr)
    finally:
        socket.close()
