import pytest

from clinic import cli, services
from clinic.client import ClinicApiError


@pytest.fixture(autouse=True)
def keep_logging(monkeypatch):
    # main() would rebind the root handler to the captured stdout
    monkeypatch.setattr(cli, "setup_logging", lambda: None)


def test_init_with_seed(capsys):
    cli.main(["init", "--seed"])

    assert "DB initialized and demo data loaded." in capsys.readouterr().out
    assert [p["name"] for p in services.list_patients()] == ["Ada Lovelace", "Alan Turing", "Grace Hopper"]
    assert len(services.list_sessions()) == 3


def test_seed_twice_adds_nothing():
    cli.main(["init", "--seed"])
    cli.main(["init", "--seed"])

    assert len(services.list_therapists()) == 3
    assert len(services.list_sessions()) == 3


def test_init_reset_clears_data(make_patient, capsys):
    make_patient()

    cli.main(["init", "--reset"])

    assert "DB initialized." in capsys.readouterr().out
    assert services.list_patients() == []


def test_add_and_list(capsys):
    cli.main(["add-patient", "--name", "Ada", "--dob", "1985-12-10"])
    cli.main(["add-therapist", "--name", "Dr. Lee", "--specialty", "OT"])
    cli.main(["book", "--patient-id", "1", "--therapist-id", "1", "--date", "2025-01-01T10:00:00Z"])
    capsys.readouterr()

    cli.main(["list", "sessions"])

    out = capsys.readouterr().out
    assert "Scheduled" in out
    assert "Ada with Dr. Lee" in out


def test_set_status(make_patient, make_therapist, make_session, capsys):
    x = make_session(make_patient()["id"], make_therapist()["id"])

    cli.main(["set-status", "--session-id", str(x["id"]), "--status", "No-show"])

    assert f"Session {x['id']}: No-show" in capsys.readouterr().out


def test_validation_error_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["add-patient", "--name", "  "])

    assert exc_info.value.code == 1
    assert "name: Name is required" in capsys.readouterr().err


def test_domain_error_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["book", "--patient-id", "9", "--therapist-id", "9", "--date", "2025-01-01"])

    assert exc_info.value.code == 1
    assert "Patient not found" in capsys.readouterr().err


class _FakeClient:
    sessions: list[dict] = []
    error: Exception | None = None

    def __init__(self, base_url):
        self.base_url = base_url

    def list_sessions(self, search=None, status=None, sort_order="asc"):
        if self.error:
            raise self.error
        return self.sessions


def test_browse(monkeypatch, capsys):
    fake = type("Fake", (_FakeClient,), {
        "sessions": [{"id": 1, "date": "2025-01-01T10:00:00+00:00", "status": "Scheduled",
                      "patientName": "Ada", "therapistName": "Dr. Lee"}],
    })
    monkeypatch.setattr(cli, "ClinicClient", fake)

    cli.main(["browse", "--api", "http://clinic.test", "--sort", "desc"])

    assert "1 | 2025-01-01T10:00:00+00:00 | Scheduled | Ada with Dr. Lee" in capsys.readouterr().out


def test_browse_empty(monkeypatch, capsys):
    monkeypatch.setattr(cli, "ClinicClient", _FakeClient)

    cli.main(["browse"])

    assert "No sessions found." in capsys.readouterr().out


def test_browse_api_error(monkeypatch, capsys):
    fake = type("Fake", (_FakeClient,), {"error": ClinicApiError(500, "Internal server error")})
    monkeypatch.setattr(cli, "ClinicClient", fake)

    with pytest.raises(SystemExit):
        cli.main(["browse"])

    assert "Internal server error" in capsys.readouterr().err


def test_unknown_status_rejected_by_parser():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["set-status", "--session-id", "1", "--status", "Later"])
    assert exc_info.value.code == 2
