from datetime import date

import pytest

import microservice_clients as clients


@pytest.fixture
def sent(monkeypatch):
    calls = []
    replies = []

    def fake_send(port, payload):
        calls.append((port, payload))
        return replies.pop(0)

    monkeypatch.setattr(clients, "_send_bytes", fake_send)
    return calls, replies


def test_register_habit_payload(sent):
    calls, replies = sent
    replies.append(({"status": "ok", "habit_id": "abc"}, None))
    response, error = clients.register_habit("Walk", (1, 3), port=6000)
    assert error is None
    assert response["habit_id"] == "abc"
    assert calls == [(6000, {"request_type": "register_habit", "title": "Walk", "weekdays": [1, 3]})]


def test_day_overview_formats_dates(sent):
    calls, replies = sent
    replies.append(({"status": "ok", "due_habits": [], "completed_habits": []}, None))
    clients.day_overview(date(2024, 1, 3), port=6000)
    assert calls[0][1] == {"request_type": "get_day", "date": "2024-01-03"}


def test_toggle_omits_date_when_not_given(sent):
    calls, replies = sent
    replies.append(({"status": "ok", "completed": True}, None))
    replies.append(({"status": "ok", "completed": False}, None))
    clients.toggle_habit("abc", port=6000)
    clients.toggle_habit("abc", when="2024-01-03", port=6000)
    assert calls[0][1] == {"request_type": "toggle_habit", "habit_id": "abc"}
    assert calls[1][1]["date"] == "2024-01-03"


def test_uses_configured_port(sent, monkeypatch):
    calls, replies = sent
    monkeypatch.setenv("HABIT_SERVICE_PORT", "6123")
    replies.append(({"status": "ok", "summary": []}, None))
    clients.summary()
    assert calls[0][0] == 6123


def test_service_error_becomes_message(sent):
    _, replies = sent
    replies.append(({"status": "error", "error_type": "not_found", "error": "Habit 'x' does not exist."}, None))
    response, error = clients.toggle_habit("x", port=6000)
    assert response is None
    assert error == "Habit 'x' does not exist."


def test_transport_error_passes_through(sent):
    _, replies = sent
    replies.append((None, "Timed out contacting service on port 6000."))
    response, error = clients.list_habits(port=6000)
    assert response is None
    assert "Timed out" in error
