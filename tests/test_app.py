import logging

import app


def test_build_tracker_reads_creation_day_setting(tmp_path, monkeypatch):
    monkeypatch.setenv("HABIT_COUNT_CREATION_DAY", "1")
    tracker = app.build_tracker(str(tmp_path / "habits.json"))
    assert tracker.include_creation_day is True
    assert tracker.list_habits() == []


def test_main_runs_service_on_given_port(tmp_path, monkeypatch):
    started = []
    monkeypatch.setenv("HABIT_DATA_PATH", str(tmp_path / "habits.json"))
    monkeypatch.setattr(app, "run_service", lambda tracker, port: started.append((tracker, port)))
    monkeypatch.setattr(app.config, "setup_logging", lambda: logging.getLogger())

    assert app.main(["6100"]) == 0
    assert started[0][1] == 6100
    assert started[0][0].repo.path == str(tmp_path / "habits.json")


def test_main_falls_back_on_bad_port(tmp_path, monkeypatch, capsys):
    started = []
    monkeypatch.setenv("HABIT_DATA_PATH", str(tmp_path / "habits.json"))
    monkeypatch.delenv("HABIT_SERVICE_PORT", raising=False)
    monkeypatch.setattr(app, "run_service", lambda tracker, port: started.append(port))
    monkeypatch.setattr(app.config, "setup_logging", lambda: logging.getLogger())

    app.main(["abc"])
    assert started == [5566]
    assert "Invalid port 'abc'" in capsys.readouterr().out
