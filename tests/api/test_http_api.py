from __future__ import annotations

from src.hrms.hrms.core.enums import Role

PASSWORD = "Secret@123"


def test_health_and_root(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.get_json()["status"] == "ok"
    assert health.get_json()["timestamp"]
    body = client.get("/api/v1").get_json()
    assert body["success"] is True
    assert body["version"] == "1.0.0"


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "Route not found"}


def test_signup_validation_lists_field_errors(client):
    resp = client.post("/api/v1/auth/signup", json={"email": "bad", "password": "short"})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    fields = {e["field"] for e in body["errors"]}
    assert fields == {"employee_id", "email", "password"}


def test_signup_verify_signin_me(world, client):
    resp = client.post(
        "/api/v1/auth/signup", json={"employee_id": "EMP0100", "email": "new@example.com", "password": PASSWORD}
    )
    assert resp.status_code == 201

    _, _, token = world.mailer.last("verification")
    assert client.get(f"/api/v1/auth/verify-email?token={token}").status_code == 200

    resp = client.post("/api/v1/auth/signin", json={"email": "new@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    tokens = resp.get_json()
    assert tokens["user"]["role"] == "employee"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.get_json()["user"]["email"] == "new@example.com"
    assert me.get_json()["profile"] is None


def test_signin_failure_status_and_message(client):
    resp = client.post("/api/v1/auth/signin", json={"email": "who@example.com", "password": PASSWORD})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def test_auth_errors_by_status(world, client, employee):
    assert client.get("/api/v1/profiles/me").status_code == 401
    bad = client.get("/api/v1/profiles/me", headers={"Authorization": "Bearer junk"})
    assert bad.status_code == 401
    assert bad.get_json()["message"] == "Invalid token"

    forbidden = client.get("/api/v1/profiles/employees", headers=world.bearer(employee))
    assert forbidden.status_code == 403


def test_attendance_day_cycle(world, client, employee):
    headers = world.bearer(employee)

    first = client.post("/api/v1/attendance/check-in", headers=headers)
    assert first.status_code == 200
    assert first.get_json()["attendance"]["status"] == "present"

    again = client.post("/api/v1/attendance/check-in", headers=headers)
    assert again.status_code == 400
    assert again.get_json()["message"] == "Already checked in today"

    assert client.post("/api/v1/attendance/check-out", headers=headers).status_code == 200
    history = client.get("/api/v1/attendance/me", headers=headers).get_json()["attendance"]
    assert len(history) == 1


def test_leave_apply_and_decide(world, client, hr, employee):
    resp = client.post(
        "/api/v1/leaves",
        headers=world.bearer(employee),
        json={"leave_type": "casual", "start_date": "2024-04-01", "end_date": "2024-04-02T00:00:00.000Z"},
    )
    assert resp.status_code == 201
    leave = resp.get_json()["leave"]
    assert leave["status"] == "pending"
    assert leave["days"] == 2

    bad = client.put(f"/api/v1/leaves/{leave['leave_id']}", headers=world.bearer(hr), json={"status": "pending"})
    assert bad.status_code == 400

    ok = client.put(
        f"/api/v1/leaves/{leave['leave_id']}",
        headers=world.bearer(hr),
        json={"status": "approved", "admin_remarks": "fine"},
    )
    assert ok.status_code == 200
    assert ok.get_json()["leave"]["admin_remarks"] == "fine"

    balance = client.get("/api/v1/profiles/leave-balance", headers=world.bearer(employee)).get_json()
    assert balance["balance"]["casual"] == 10
    assert balance["used_leaves"] == {"casual": 2.0}


def test_payroll_create_and_listing(world, client, hr, employee):
    resp = client.post(
        "/api/v1/payroll",
        headers=world.bearer(hr),
        json={"employee_id": "EMP0001", "month": 3, "year": 2024, "basic": 1000, "hra": 100},
    )
    assert resp.status_code == 201
    assert resp.get_json()["payroll"]["net_pay"] == 1100

    bad_month = client.post(
        "/api/v1/payroll",
        headers=world.bearer(hr),
        json={"employee_id": "EMP0001", "month": 13, "year": 2024, "basic": 1000},
    )
    assert bad_month.status_code == 400

    mine = client.get("/api/v1/payroll/me", headers=world.bearer(employee)).get_json()["payrolls"]
    assert [p["month"] for p in mine] == [3]

    assert client.post(
        "/api/v1/payroll/generate", headers=world.bearer(hr), json={"month": 3, "year": 2024}
    ).status_code == 403


def test_report_csv_download(world, client, hr, employee):
    resp = client.get("/api/v1/reports/employees.csv", headers=world.bearer(hr))

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attachment" in resp.headers["Content-Disposition"]
    text = resp.data.decode("utf-8-sig")
    assert text.startswith("employee_id,first_name,last_name,email,role")
    assert "\r\n" in text


def test_admin_profile_edit_and_audit(world, client, admin, employee):
    resp = client.put(
        "/api/v1/profiles/employees/EMP0001", headers=world.bearer(admin), json={"department": "Platform"}
    )
    assert resp.status_code == 200

    audit = client.get("/api/v1/profiles/employees/EMP0001/audit", headers=world.bearer(admin)).get_json()["audit"]
    assert audit[0]["after"]["job_details"]["department"] == "Platform"


def test_notifications_endpoints(world, client, employee):
    world.container.notification_service.notify(employee.account_id, type="leave_update", title="t", message="m")
    headers = world.bearer(employee)

    listed = client.get("/api/v1/notifications", headers=headers).get_json()["notifications"]
    assert listed[0]["is_read"] is False

    nid = listed[0]["notification_id"]
    assert client.put(f"/api/v1/notifications/{nid}/read", headers=headers).get_json()["notification"]["is_read"]
    assert client.put("/api/v1/notifications/mark-all-read", headers=headers).get_json()["updated"] == 0
    assert client.delete(f"/api/v1/notifications/{nid}", headers=headers).status_code == 200
    assert client.delete(f"/api/v1/notifications/{nid}", headers=headers).status_code == 404


def test_add_employee_endpoint(world, client, admin):
    resp = client.post(
        "/api/v1/auth/add-employee",
        headers=world.bearer(admin),
        json={
            "first_name": "Nia",
            "last_name": "Park",
            "email": "nia@example.com",
            "password": PASSWORD,
            "department": "Finance",
            "job_title": "Analyst",
            "basic_salary": 40000,
            "role": "hr",
        },
    )
    assert resp.status_code == 201
    assert world.accounts.get_by_email("nia@example.com").role == Role.HR


def test_payroll_rejects_non_finite_amounts(world, client, hr, employee):
    resp = client.post(
        "/api/v1/payroll",
        headers=world.bearer(hr),
        json={"employee_id": "EMP0001", "month": 3, "year": 2024, "basic": "NaN", "hra": "Infinity"},
    )

    assert resp.status_code == 400
    assert {e["field"] for e in resp.get_json()["errors"]} == {"basic", "hra"}
    assert world.payroll.get_for_period("EMP0001", 3, 2024) is None


def test_leave_balance_update_rejects_nan(world, client, hr, employee):
    resp = client.put(
        "/api/v1/profiles/leave-balance/EMP0001",
        headers=world.bearer(hr),
        json={"leave_type": "sick", "balance": "nan"},
    )

    assert resp.status_code == 400
    assert resp.get_json()["errors"] == [{"field": "balance", "message": "Balance must be a number"}]


def test_leave_with_time_of_day_counts_whole_days(world, client, hr, employee):
    resp = client.post(
        "/api/v1/leaves",
        headers=world.bearer(employee),
        json={"leave_type": "sick", "start_date": "2024-01-01T00:00:00", "end_date": "2024-01-02T12:00:00"},
    )
    assert resp.status_code == 201
    leave_id = resp.get_json()["leave"]["leave_id"]

    decided = client.put(f"/api/v1/leaves/{leave_id}", headers=world.bearer(hr), json={"status": "approved"})
    assert decided.status_code == 200

    balance = client.get("/api/v1/profiles/leave-balance", headers=world.bearer(employee)).get_json()
    assert balance["used_leaves"] == {"sick": 2.5}
    assert balance["balance"]["sick"] == 9
