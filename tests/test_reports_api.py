from datetime import date, datetime, timedelta


def _withdraw(client, h, tool_id, quantity, reason="Desgaste"):
    body = {
        "tool_id": tool_id, "quantity": quantity, "reason": reason,
        "supervisor": "Edson", "operator": "Carlos", "rig_tag": "PH21", "team": "Turma B",
    }
    r = client.post("/withdrawals", json=body, headers=h)
    assert r.status_code == 200


def test_dashboard(client, auth_headers):
    h = auth_headers
    _withdraw(client, h, "t51-haste", 13)
    _withdraw(client, h, "t45-bit35", 2)

    d = client.get("/reports/dashboard", headers=h).json()
    assert d["withdrawals_today"] == 2
    assert d["most_used_model"] == "T51"
    assert d["low_stock_count"] == 1
    assert d["low_stock"][0]["id"] == "t51-haste"
    assert d["total_tools"] == 199 - 15


def test_consumption_reports(client, auth_headers):
    h = auth_headers
    _withdraw(client, h, "t51-haste", 3, reason="Trinca")
    _withdraw(client, h, "t50-punho", 5, reason="Trinca")
    _withdraw(client, h, "t51-haste", 1, reason="Desgaste")

    by_tool = client.get("/reports/by-tool", headers=h).json()
    assert [(r["tool_id"], r["total"]) for r in by_tool] == [("t50-punho", 5), ("t51-haste", 4)]

    by_reason = client.get("/reports/by-reason", headers=h).json()
    assert by_reason[0] == {"reason": "Trinca", "total": 8}
    assert len(by_reason) == 6

    past = client.get("/reports/by-reason?end=2000-01-01", headers=h).json()
    assert all(r["total"] == 0 for r in past)


def test_evolution_today_only(client, auth_headers):
    h = auth_headers
    assert client.get("/reports/evolution", headers=h).json() == []

    _withdraw(client, h, "t51-haste", 2)
    series = client.get("/reports/evolution?granularity=daily", headers=h).json()
    assert len(series) == 1
    assert series[0]["total"] == 2
    assert series[0]["period_start"] == date.today().isoformat()


def test_insights_fallback_without_key(client, auth_headers):
    r = client.get("/reports/insights", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["text"] == "Não foi possível carregar os insights no momento."


def test_client_date_is_rejected_and_withdrawal_counts_today(client, auth_headers):
    h = auth_headers
    future = (datetime.now() + timedelta(days=3)).isoformat()
    body = {
        "tool_id": "t51-haste", "quantity": 5, "reason": "Desgaste",
        "supervisor": "Edson", "operator": "Carlos", "rig_tag": "PH21", "team": "Turma B",
        "date": future,
    }
    r = client.post("/withdrawals", json=body, headers=h)
    assert r.status_code == 422
    assert client.get("/tools/t51-haste", headers=h).json()["quantity"] == 20

    del body["date"]
    assert client.post("/withdrawals", json=body, headers=h).status_code == 200
    series = client.get("/reports/evolution", headers=h).json()
    assert sum(p["total"] for p in series) == 5
