import pytest

from closerdesk.models import Appointment, Closer, CloserAuditLog, Task


def test_list_closers_with_derived_stats(client, admin_headers, make_closer, make_appointment):
    ana = make_closer("Ana")
    make_closer("Ben", active=False)
    make_appointment(closer=ana, outcome="converted", sale_value=500)
    make_appointment(closer=ana, outcome="no_answer")

    res = client.get("/api/admin/closers", headers=admin_headers)

    assert res.status_code == 200
    rows = {row["name"]: row for row in res.json()["closers"]}
    assert set(rows) == {"Ana", "Ben"}
    assert rows["Ana"]["totalCalls"] == 2
    assert rows["Ana"]["totalConversions"] == 1
    assert rows["Ana"]["totalRevenue"] == 500.0
    assert rows["Ana"]["conversionRate"] == pytest.approx(0.5)
    assert rows["Ben"]["totalCalls"] == 0
    assert rows["Ben"]["isActive"] is False


def test_eligible_closers_are_labelled(client, admin_headers, make_closer, make_appointment):
    ana = make_closer("Ana")
    make_closer("Pending", approved=False)
    make_closer("Inactive", active=False)
    for outcome in ("converted", "no_answer", "no_answer", "not_interested"):
        make_appointment(closer=ana, outcome=outcome)

    res = client.get("/api/admin/closers/eligible", headers=admin_headers)

    rows = res.json()["closers"]
    assert [row["name"] for row in rows] == ["Ana"]
    assert rows[0]["label"] == "Ana (4 calls, 25.0% conv.)"


def test_approve_activates_closer(client, admin_headers, db, make_closer):
    pending = make_closer("Pending", active=False, approved=False)

    res = client.put(f"/api/admin/closers/{pending.id}/approve", headers=admin_headers)

    assert res.status_code == 200
    closer = res.json()["closer"]
    assert closer["isApproved"] is True
    assert closer["isActive"] is True
    assert db.query(CloserAuditLog).filter(CloserAuditLog.action == "approved").count() == 1


def test_deactivate_toggles(client, admin_headers, make_closer):
    ana = make_closer("Ana")

    first = client.put(f"/api/admin/closers/{ana.id}/deactivate", headers=admin_headers)
    second = client.put(f"/api/admin/closers/{ana.id}/deactivate", headers=admin_headers)

    assert first.json()["closer"]["isActive"] is False
    assert second.json()["closer"]["isActive"] is True


def test_deactivated_closer_leaves_the_rotation(client, admin_headers, db, make_closer, make_appointment):
    ana = make_closer("Ana")
    ben = make_closer("Ben")
    client.put(f"/api/admin/closers/{ana.id}/deactivate", headers=admin_headers)
    apts = [make_appointment() for _ in range(3)]

    client.post("/api/admin/auto-assign-appointments", headers=admin_headers)

    for apt in apts:
        db.refresh(apt)
        assert apt.closer_id == ben.id


def test_update_calendly_link(client, admin_headers, make_closer):
    ana = make_closer("Ana")

    res = client.put(
        f"/api/admin/closers/{ana.id}/calendly-link",
        headers=admin_headers,
        json={"calendlyLink": " https://calendly.com/ana "},
    )
    assert res.json()["closer"]["calendlyLink"] == "https://calendly.com/ana"

    res = client.put(f"/api/admin/closers/{ana.id}/calendly-link", headers=admin_headers, json={"calendlyLink": ""})
    assert res.json()["closer"]["calendlyLink"] is None


def test_delete_closer_unassigns_work(client, admin_headers, db, make_closer, make_appointment):
    ana = make_closer("Ana")
    apts = [make_appointment(closer=ana) for _ in range(2)]
    task = Task(closer_id=ana.id, title="Call back", priority="high", status="pending")
    db.add(task)
    db.commit()
    closer_id = ana.id

    res = client.delete(f"/api/admin/closers/{closer_id}", headers=admin_headers)

    assert res.status_code == 200
    assert res.json()["unassignedAppointments"] == 2
    assert db.query(Closer).filter(Closer.id == closer_id).first() is None
    assert db.query(Appointment).count() == 2
    for apt in apts:
        db.refresh(apt)
        assert apt.closer_id is None
    db.refresh(task)
    assert task.closer_id is None


def test_unknown_closer(client, admin_headers):
    assert client.put("/api/admin/closers/nope/approve", headers=admin_headers).status_code == 404
    assert client.delete("/api/admin/closers/nope", headers=admin_headers).status_code == 404
