from collections import Counter

from closerdesk.models import Appointment, CloserAuditLog


def test_admin_routes_require_token(client):
    assert client.get("/api/admin/appointments").status_code == 401
    assert client.post("/api/admin/auto-assign-appointments").status_code == 401


def test_closer_token_is_not_admin(client, make_closer, closer_headers):
    ana = make_closer("Ana")
    res = client.get("/api/admin/appointments", headers=closer_headers(ana))
    assert res.status_code == 401


def test_admin_cookie_is_accepted(client, admin_headers):
    token = admin_headers["Authorization"].split(" ", 1)[1]
    client.cookies.set("admin_token", token)
    try:
        assert client.get("/api/admin/appointments").status_code == 200
    finally:
        client.cookies.clear()


# ---------------------------------------------------------
# LIST / CREATE
# ---------------------------------------------------------
def test_list_appointments_is_camel_case_with_closer(client, admin_headers, make_closer, make_appointment):
    ana = make_closer("Ana")
    make_appointment(name="Bob", closer=ana)
    make_appointment(name="Quiz Lead", type="quiz_session")

    res = client.get("/api/admin/appointments", headers=admin_headers)

    assert res.status_code == 200
    rows = res.json()["appointments"]
    assert len(rows) == 2
    bob = next(r for r in rows if r["customerName"] == "Bob")
    assert bob["closerId"] == ana.id
    assert bob["closer"]["name"] == "Ana"
    assert bob["recordingLink"] is None
    assert "scheduledAt" in bob


def test_create_appointment(client, admin_headers, db):
    res = client.post("/api/admin/appointments", headers=admin_headers, json={
        "customerName": "Carla",
        "customerEmail": "Carla@Example.com",
        "scheduledAt": "2026-04-01T15:00:00",
    })

    assert res.status_code == 200
    body = res.json()["appointment"]
    assert body["status"] == "scheduled"
    assert body["closerId"] is None
    assert body["duration"] == 30
    assert body["customerEmail"] == "carla@example.com"
    assert db.query(Appointment).count() == 1


# ---------------------------------------------------------
# AUTO-ASSIGN
# ---------------------------------------------------------
def test_auto_assign_round_robin(client, admin_headers, db, make_closer, make_appointment):
    a = make_closer("A")
    b = make_closer("B")
    apts = [make_appointment(name=f"apt{i}") for i in range(1, 6)]

    res = client.post("/api/admin/auto-assign-appointments", headers=admin_headers)

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["assignedCount"] == 5
    by_name = {item["customerName"]: item["closerName"] for item in body["assignments"]}
    assert by_name == {"apt1": "A", "apt2": "B", "apt3": "A", "apt4": "B", "apt5": "A"}

    for apt in apts:
        db.refresh(apt)
        assert apt.closer_id in (a.id, b.id)
        assert apt.status == "confirmed"


def test_auto_assign_skips_ineligible_assigned_and_quiz(client, admin_headers, db, make_closer, make_appointment):
    active = make_closer("Active")
    make_closer("Inactive", active=False)
    make_closer("Pending", approved=False)
    other = make_closer("Other", active=False)
    taken = make_appointment(name="taken", closer=other)
    quiz = make_appointment(name="quiz", type="quiz_session")
    open_apts = [make_appointment(name=f"open{i}") for i in range(3)]

    res = client.post("/api/admin/auto-assign-appointments", headers=admin_headers)

    assert res.json()["assignedCount"] == 3
    for apt in open_apts:
        db.refresh(apt)
        assert apt.closer_id == active.id
    db.refresh(taken)
    db.refresh(quiz)
    assert taken.closer_id == other.id
    assert quiz.closer_id is None


def test_auto_assign_is_balanced(client, admin_headers, db, make_closer, make_appointment):
    closers = [make_closer(name) for name in ("A", "B", "C")]
    for i in range(10):
        make_appointment(name=f"apt{i}")

    client.post("/api/admin/auto-assign-appointments", headers=admin_headers)

    counts = Counter(row.closer_id for row in db.query(Appointment).all())
    assert set(counts) == {c.id for c in closers}
    assert max(counts.values()) - min(counts.values()) <= 1


def test_auto_assign_without_closers_changes_nothing(client, admin_headers, db, make_closer, make_appointment):
    make_closer("Off", active=False)
    apt = make_appointment()

    res = client.post("/api/admin/auto-assign-appointments", headers=admin_headers)

    assert res.status_code == 200
    assert res.json()["assignedCount"] == 0
    assert res.json()["assignments"] == []
    db.refresh(apt)
    assert apt.closer_id is None
    assert apt.status == "scheduled"


def test_auto_assign_nothing_to_do(client, admin_headers, make_closer):
    make_closer("A")
    res = client.post("/api/admin/auto-assign-appointments", headers=admin_headers)
    assert res.json()["assignedCount"] == 0


def test_auto_assign_writes_audit_rows(client, admin_headers, db, make_closer, make_appointment):
    a = make_closer("A")
    apt = make_appointment()

    client.post("/api/admin/auto-assign-appointments", headers=admin_headers)

    log = db.query(CloserAuditLog).filter(CloserAuditLog.closer_id == a.id).one()
    assert log.action == "appointment_assigned"
    assert log.details["appointmentId"] == apt.id
    assert log.details["assignedBy"] == "auto"


# ---------------------------------------------------------
# MANUAL ASSIGN
# ---------------------------------------------------------
def test_manual_assign(client, admin_headers, db, make_closer, make_appointment):
    ana = make_closer("Ana")
    apt = make_appointment()

    res = client.put(f"/api/admin/appointments/{apt.id}/assign", headers=admin_headers, json={"closerId": ana.id})

    assert res.status_code == 200
    body = res.json()["appointment"]
    assert body["closerId"] == ana.id
    assert body["status"] == "confirmed"


def test_manual_assign_overwrites_existing_closer(client, admin_headers, db, make_closer, make_appointment):
    ana = make_closer("Ana")
    ben = make_closer("Ben")
    apt = make_appointment(closer=ana, status="confirmed")

    res = client.put(f"/api/admin/appointments/{apt.id}/assign", headers=admin_headers, json={"closerId": ben.id})

    assert res.status_code == 200
    db.refresh(apt)
    assert apt.closer_id == ben.id


def test_manual_assign_keeps_completed_status(client, admin_headers, db, make_closer, make_appointment):
    ana = make_closer("Ana")
    apt = make_appointment(status="completed", outcome="no_answer")

    client.put(f"/api/admin/appointments/{apt.id}/assign", headers=admin_headers, json={"closerId": ana.id})

    db.refresh(apt)
    assert apt.status == "completed"


def test_manual_assign_rejects_ineligible_closer(client, admin_headers, db, make_closer, make_appointment):
    pending = make_closer("Pending", approved=False)
    apt = make_appointment()

    res = client.put(f"/api/admin/appointments/{apt.id}/assign", headers=admin_headers, json={"closerId": pending.id})

    assert res.status_code == 400
    assert res.json()["error"]
    db.refresh(apt)
    assert apt.closer_id is None


def test_manual_assign_requires_closer_id(client, admin_headers, db, make_appointment):
    apt = make_appointment()

    res = client.put(f"/api/admin/appointments/{apt.id}/assign", headers=admin_headers, json={"closerId": ""})

    assert res.status_code == 400
    db.refresh(apt)
    assert apt.closer_id is None


def test_manual_assign_unknown_ids(client, admin_headers, make_closer, make_appointment):
    ana = make_closer("Ana")
    apt = make_appointment()

    res = client.put("/api/admin/appointments/missing/assign", headers=admin_headers, json={"closerId": ana.id})
    assert res.status_code == 404

    res = client.put(f"/api/admin/appointments/{apt.id}/assign", headers=admin_headers, json={"closerId": "missing"})
    assert res.status_code == 404


# ---------------------------------------------------------
# OUTCOME (admin)
# ---------------------------------------------------------
def test_admin_can_record_outcome_on_any_appointment(client, admin_headers, db, make_closer, make_appointment):
    ana = make_closer("Ana")
    apt = make_appointment(closer=ana)

    res = client.put(f"/api/admin/appointments/{apt.id}/outcome", headers=admin_headers, json={
        "outcome": "converted",
        "saleValue": 1000,
    })

    assert res.status_code == 200
    body = res.json()
    assert body["appointment"]["outcome"] == "converted"
    assert body["closerStats"]["totalConversions"] == 1


def test_admin_outcome_on_unassigned_appointment_has_no_stats(client, admin_headers, make_appointment):
    apt = make_appointment()

    res = client.put(f"/api/admin/appointments/{apt.id}/outcome", headers=admin_headers, json={"outcome": "no_answer"})

    assert res.status_code == 200
    assert res.json()["closerStats"] is None


# ---------------------------------------------------------
# DELETE
# ---------------------------------------------------------
def test_delete_is_idempotent(client, admin_headers, db, make_appointment):
    apt = make_appointment()

    first = client.delete(f"/api/admin/appointments/{apt.id}", headers=admin_headers)
    second = client.delete(f"/api/admin/appointments/{apt.id}", headers=admin_headers)

    assert first.status_code == 200
    assert first.json() == {"success": True, "deleted": True}
    assert second.status_code == 200
    assert second.json() == {"success": True, "deleted": False}
    assert db.query(Appointment).count() == 0


def test_delete_updates_closer_stats(client, admin_headers, make_closer, make_appointment, closer_headers):
    ana = make_closer("Ana")
    make_appointment(closer=ana, outcome="converted", sale_value=100)
    gone = make_appointment(closer=ana, outcome="converted", sale_value=400)

    client.delete(f"/api/admin/appointments/{gone.id}", headers=admin_headers)

    stats = client.get("/api/closer/stats", headers=closer_headers(ana)).json()["closer"]
    assert stats["totalCalls"] == 1
    assert stats["totalRevenue"] == 100.0
